"""Data subpackage - catalog file loading."""
