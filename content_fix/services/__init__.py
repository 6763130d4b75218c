# content_fix/services/__init__.py
"""
Business logic services.

Subpackages are imported explicitly (content_fix.services.correction,
content_fix.services.integrity); generation backends import
content_fix.services.resilience, so nothing is re-exported here.
"""
