"""
NIGHTPLAN Services Package

Service modules organized by function.

Scheduling (services.scheduling)
--------------------------------
- ObservationScheduler: Greedy single-timeline placement of imaging sequences
- RuleStore: Schedule rules with condition evaluation
- ScheduleTracker: Real-time status of placed sequences
"""

__version__ = "0.1.0"
