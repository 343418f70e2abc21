"""
Cloud-Search: AWS Compliance Scanner
====================================

Runs compliance rules against the resources of an AWS account and
reports one verdict (OK, WARNING, FAIL, UNKNOWN) per resource.

Modules
-------
core
    Core infrastructure (AWS client, region resolution, paging, key trust,
    scan driver)
rules
    Compliance rules, grouped by service
reporters
    Progress reporting and output rendering (terminal, JSON)

Example
-------
>>> from cloud_search import ScanDriver
>>> from cloud_search.rules import QueueEncrypted
>>>
>>> driver = ScanDriver(QueueEncrypted, region="us-east-1", key_type="customer")
>>> for audit in driver.start():
...     print(audit.state, audit.physical_id)

Notes
-----
Requires AWS credentials configured via:
- Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
- AWS credentials file (~/.aws/credentials)
- IAM role (when running on AWS infrastructure)

See Also
--------
boto3 : AWS SDK for Python
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Public API
from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.aws_client import AWSClient
from cloud_search.core.exceptions import CloudSearchError, PreconditionError
from cloud_search.core.scan_driver import DriverState, ScanDriver

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Core classes
    "AWSClient",
    "AuditResult",
    "AuditState",
    "DriverState",
    "ScanDriver",
    # Exceptions
    "CloudSearchError",
    "PreconditionError",
]
