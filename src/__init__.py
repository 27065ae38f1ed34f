"""Spring Native Hints: reflective-access hint resolution."""
