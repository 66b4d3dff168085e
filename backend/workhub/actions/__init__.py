"""
Action orchestrators.

Each public function is one server action: it resolves the caller,
authorizes, loads and validates, persists, audits and invalidates routes,
and always returns an ActionResult instead of raising.
"""
