"""Ownership rules for tasks.

Decisions compare the principal's id with ``created_by`` and ``assigned_to``
and nothing else.
"""


def is_creator(principal, task) -> bool:
    return task.created_by == principal.id


def is_assignee(principal, task) -> bool:
    return task.assigned_to is not None and task.assigned_to == principal.id


def can_read(principal, task) -> bool:
    return is_creator(principal, task) or is_assignee(principal, task)


def can_update(principal, task) -> bool:
    return can_read(principal, task)


def can_delete(principal, task) -> bool:
    return is_creator(principal, task)
