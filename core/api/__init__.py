"""Framework routers (login, sign-up, sign-out, session)."""
