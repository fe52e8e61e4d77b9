"""
Field Dispatch Service.

Books field-service jobs, prices them and tracks them from supplier
acceptance through to on-site completion.
"""

__version__ = "0.1.0"
__description__ = "Field Dispatch Service"
