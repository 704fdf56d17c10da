"""A controller package that forgot to define register() or router."""
