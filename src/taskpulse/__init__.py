"""TaskPulse — multi-tenant task tracking backend.

Users register under a named workspace, log in, and create, assign and
update tasks scoped to that workspace. Admins see every task in their
workspace; Members see the tasks assigned to them.
"""

__version__ = "0.1.0"
