"""Functional capacity evaluation domain logic: trial arithmetic, norms,
categorization, crosschecks, job match, cardio scoring and wizard state.

Modules here are pure functions over plain dicts shaped like the stored
evaluation sections, so the API and report layers share one implementation.
"""
