"""
Operations layer -- the request-level use cases of docrest.

Every function takes an :class:`~docrest.ops.context.OperationContext`
and a typed request, and returns an
:class:`~docrest.ops.result.OperationResult`.  The HTTP API and the CLI
are thin transports over these functions.
"""
