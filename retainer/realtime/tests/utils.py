def deliveries(server) -> list[tuple[str, dict]]:
    """(sid, message) pairs in the order the fake server emitted them."""

    return [(c.kwargs["to"], c.args[1]) for c in server.emit.await_args_list]
