"""Service layer — task operations over Markdown files.

Every public method returns a :class:`ServiceResult`.
"""
