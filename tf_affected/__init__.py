"""tf-affected: find the Terraform projects impacted by a set of changed files."""

__version__ = "0.3.0"
