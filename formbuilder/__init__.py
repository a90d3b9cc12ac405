"""Form builder API: forms, responses and the answer scoring engine."""
