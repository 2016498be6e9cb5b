"""Alert synthesis — fallback rules, prioritization, and the detector."""
