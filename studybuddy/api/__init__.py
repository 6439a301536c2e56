"""HTTP surface for Study Buddy."""
