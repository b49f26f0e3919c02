"""HTTP interface for the character builder."""
