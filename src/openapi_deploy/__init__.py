"""Deploy OpenAPI documents to AWS API Gateway."""

__version__ = "0.1.0"
