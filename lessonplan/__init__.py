"""
LessonPlan: period-based lesson schedules for one teacher.

Generates a schedule from a teaching configuration and course lesson lists,
keeps it consistent while special days are added or removed, and exports it.
"""
