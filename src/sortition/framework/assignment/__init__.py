"""
==========================
Assigning Parameter Values
==========================

"""
from sortition.framework.assignment.context import Assignment
from sortition.framework.assignment.exceptions import AssignmentError, UndefinedSlotError
