"""HTTP surface: routes, dependencies, middleware and error handlers."""
