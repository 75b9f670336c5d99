"""Sample entity graphs shared by the drafting tests."""
