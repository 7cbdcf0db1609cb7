"""
Registrations Module

The chapter membership workflow:
1. Apply - a student requests to join a chapter (pending)
2. Decide - the chapter head approves or rejects the request
3. Kick - the chapter head removes an approved member
4. Leave - a student leaves a chapter they belong to

Background Jobs (via APScheduler):
- reconcile_membership: recomputes member counts and students' chapter
  sets from approved requests
"""

from .jobs import register_registration_jobs

__all__ = ["register_registration_jobs"]
