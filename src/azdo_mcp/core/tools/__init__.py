"""Backend operations, one coroutine per remote resource; discovered by the registry."""
