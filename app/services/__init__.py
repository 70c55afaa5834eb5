"""
Service Organization
====================
**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: CareTaskGenerator, CareTaskReconciler, CareTaskService

``container.py`` wires repositories and services together from AppConfig.
"""
