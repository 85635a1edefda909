"""
App Attività - task e checklist per area di lavoro.
"""
