"""
Dispatch: command execution and message handling.

Import from the submodules (dispatch.update, dispatch.executor).
"""
