"""Players that do real work when played: cues, ostinatos and secondos."""
