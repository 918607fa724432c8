"""
Pytest fixtures for fieldgen tests
"""

import pytest


@pytest.fixture
def lambda_style_model():
    """
    Shape graph document where `Code` differs between Create input and Get
    output, like Lambda's CreateFunction/GetFunction.
    """
    return {
        "shapes": {
            "CreateFooRequest": {
                "members": [
                    {"name": "Name", "type": "string", "required": True},
                    {"name": "Code", "type": "CreateCode"},
                ],
            },
            "CreateCode": {
                "members": {"ImageUri": "string", "S3Bucket": "string"},
            },
            "CreateFooResponse": {"members": []},
            "GetFooResponse": {
                "members": [
                    {"name": "Name", "type": "string"},
                    {"name": "Code", "type": "GetCode"},
                ],
            },
            "GetCode": {
                "members": {"ImageUri": "string", "Location": "string"},
            },
        },
        "operations": [
            {"name": "CreateFoo", "input": "CreateFooRequest", "output": "CreateFooResponse"},
            {"name": "GetFoo", "output": "GetFooResponse"},
        ],
    }


@pytest.fixture
def repository_model():
    """A small ECR-like model: Create input/output, Describe output, List pagination."""
    return {
        "shapes": {
            "CreateRepositoryRequest": {
                "members": [
                    {"name": "RepositoryName", "type": "string", "required": True},
                    {"name": "ImageTagMutability", "type": "string"},
                    {"name": "Tags", "type": "list<Tag>"},
                ],
            },
            "Tag": {"members": {"Key": "string", "Value": "string"}},
            "CreateRepositoryResponse": {
                "members": {"Repository": "Repository"},
            },
            "Repository": {
                "members": {
                    "RepositoryArn": "string",
                    "RegistryId": "string",
                    "RepositoryName": "string",
                    "CreatedAt": "timestamp",
                },
            },
            "DescribeRepositoryResponse": {
                "members": {
                    "RepositoryName": "string",
                    "RepositoryUri": "string",
                    "CreatedAt": "timestamp",
                    "ImageTagMutability": "string",
                },
            },
            "ListRepositoriesRequest": {
                "members": {"NextToken": "string", "MaxResults": "integer"},
            },
            "ListRepositoriesResponse": {
                "members": {"Repositories": "list<Repository>", "NextToken": "string"},
            },
        },
        "operations": [
            {"name": "CreateRepository", "input": "CreateRepositoryRequest",
             "output": "CreateRepositoryResponse"},
            {"name": "DescribeRepository", "output": "DescribeRepositoryResponse"},
            {"name": "ListRepositories", "input": "ListRepositoriesRequest",
             "output": "ListRepositoriesResponse"},
        ],
    }


@pytest.fixture
def make_graph():
    """Build a ShapeGraph from a document dict."""
    from fieldgen.shapes import ShapeGraph

    def _make(document):
        return ShapeGraph.from_dict(document)

    return _make


@pytest.fixture
def make_resource():
    """Build a ResourceConfig from a `fields:` mapping as written in YAML."""
    from fieldgen.config import ResourceConfig

    def _make(fields=None, **resource):
        return ResourceConfig.model_validate({"fields": fields or {}, **resource})

    return _make
