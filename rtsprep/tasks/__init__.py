"""Celery task definitions for preparing MWA data for the RTS.

Modules:
    pipeline_tasks: Tasks wrapping mwaf reflagging and uvfits conversion.
"""
