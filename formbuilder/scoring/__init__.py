"""
scoring/ - Form Answer Scoring Engine

Modules:
    utils.py              - Percentage helper for display layers
    answer_matching.py    - Answer sanitization and typed answer parsing
    form_scorer.py        - Per-question-type scorers and compute_score()
"""
