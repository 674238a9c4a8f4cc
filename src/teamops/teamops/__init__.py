"""TeamOps package.

Feature modules (members, attendance, schedules, closing, invoices, ...)
each expose a thin Flask controller over service and repository layers.
"""
