"""HTTP routers; each delegates to one ``lifeops.ops`` module."""
