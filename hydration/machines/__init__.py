"""
Small explicit UI state machines: toasts and drag-to-claim.
"""
