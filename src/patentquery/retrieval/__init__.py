"""Request building, execution, parsing and flattening."""
