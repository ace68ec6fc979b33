"""
Attempt lifecycle and evaluation.

Trainees save and submit one attempt per date; admins grade submitted
attempts with per-question scores.
"""
