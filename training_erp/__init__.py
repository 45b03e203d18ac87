"""Training ERP core: deal session provisioning and resource scheduling."""

__version__ = "0.1.0"
