"""Pytest configuration and fixtures for tf-affected tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from tf_affected.filesystem import InMemoryFileStore
from tf_affected.resolver import ProjectResolver


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_monorepo_path() -> Path:
    """On-disk copy of the simple two-service tree."""
    return Path(__file__).parent / "fixtures" / "sample_monorepo"


@pytest.fixture
def make_resolver() -> Callable[[Dict[str, object]], ProjectResolver]:
    """Build a resolver over an in-memory tree."""
    def _make(tree: Dict[str, object]) -> ProjectResolver:
        return ProjectResolver(InMemoryFileStore.from_tree(tree))
    return _make


@pytest.fixture
def simple_tree() -> Dict[str, object]:
    """Two services with per-service modules and one shared module.

    service-a/module uses modules/database; each production directory uses
    its own ../module.
    """
    return {
        "service-a": {
            "module": {
                "provider.tf": 'provider "aws" {}',
                "main.tf": 'module "db" { source = "../../modules/database" }',
            },
            "production": {
                "provider.tf": 'provider "aws" {}',
                "main.tf": 'module "app" { source = "../module" }',
            },
        },
        "service-b": {
            "module": {
                "provider.tf": 'provider "aws" {}',
                "main.tf": 'resource "aws_s3_bucket" "data" {}',
            },
            "production": {
                "provider.tf": 'provider "aws" {}',
                "main.tf": 'module "app" { source = "../module" }',
            },
        },
        "modules": {
            "database": {
                "main.tf": 'resource "aws_db_instance" "main" {}',
                "outputs.tf": 'output "endpoint" { value = "db.example.com" }',
            },
        },
    }


@pytest.fixture
def multi_domain_tree() -> Dict[str, object]:
    """GCP organisation: _modules/ shared, domain-X/ projects, nested subdomains."""
    return {
        "_modules": {
            "multi-env-projects": {
                "folder.tf": 'resource "google_folder" "main" {}',
                "outputs.tf": 'output "folder_id" { value = google_folder.main.id }',
                "provider.tf": 'provider "google" {}',
                "variables.tf": 'variable "domain" {}',
            },
            "project": {
                "main.tf": 'resource "google_project" "main" {}',
                "outputs.tf": 'output "project_id" { value = google_project.main.id }',
                "provider.tf": 'provider "google" {}',
                "services.tf": 'resource "google_project_service" "apis" {}',
            },
        },
        "billing_accounts.tf": 'resource "google_billing_account" "main" {}',
        "domain-A": {
            "folder.tf": 'module "folder" { source = "../_modules/multi-env-projects" }',
            "project1.tf": 'module "p1" { source = "../_modules/project" }',
            "project2.tf": 'module "p2" { source = "../_modules/project" }',
            "provider.tf": 'provider "google" {}',
        },
        "domain-B": {
            "folder.tf": 'module "folder" { source = "../_modules/multi-env-projects" }',
            "project1.tf": 'module "p1" { source = "../_modules/project" }',
            "provider.tf": 'provider "google" {}',
            "subdomain-I": {
                "folder.tf": 'module "folder" { source = "../../_modules/multi-env-projects" }',
                "project1.tf": 'module "p1" { source = "../../_modules/project" }',
                "provider.tf": 'provider "google" {}',
            },
            "subdomain-II": {
                "folder.tf": 'module "folder" { source = "../../_modules/multi-env-projects" }',
                "project1.tf": 'module "p1" { source = "../../_modules/project" }',
                "provider.tf": 'provider "google" {}',
            },
        },
        "infrastructure": {
            "folder.tf": 'module "folder" { source = "../_modules/multi-env-projects" }',
            "provider.tf": 'provider "google" {}',
            "terraform-states.tf": 'resource "google_storage_bucket" "tfstate" {}',
        },
        "organization.tf": 'resource "google_organization" "org" { domain = "example.com" }',
        "provider.tf": 'provider "google" {}',
        "README.md": "# Terraform GCP Organization",
    }


@pytest.fixture
def microservices_tree() -> Dict[str, object]:
    """AWS services with per-environment directories and shared modules/."""
    def service(module_main: str, envs) -> Dict[str, object]:
        tree: Dict[str, object] = {
            "module": {
                "main.tf": module_main,
                "outputs.tf": 'output "endpoint" {}',
                "provider.tf": 'provider "aws" {}',
            },
        }
        for env in envs:
            tree[env] = {
                "main.tf": 'module "svc" { source = "../module" }',
                "provider.tf": 'provider "aws" { region = "us-east-1" }',
            }
        return tree

    return {
        "modules": {
            "vpc": {
                "main.tf": 'resource "aws_vpc" "main" {}',
                "outputs.tf": 'output "vpc_id" { value = aws_vpc.main.id }',
            },
            "eks-cluster": {
                "main.tf": 'resource "aws_eks_cluster" "main" {}\nmodule "vpc" { source = "../vpc" }',
                "outputs.tf": 'output "cluster_endpoint" {}',
            },
            "rds": {
                "main.tf": 'resource "aws_db_instance" "main" {}',
            },
        },
        "services": {
            "api-gateway": service(
                'module "vpc" { source = "../../../modules/vpc" }',
                ["dev", "staging", "prod"],
            ),
            "user-service": service(
                'module "vpc" { source = "../../../modules/vpc" }\n'
                'module "db" { source = "../../../modules/rds" }',
                ["dev", "prod"],
            ),
            "platform": service(
                'module "vpc" { source = "../../../modules/vpc" }\n'
                'module "eks" { source = "../../../modules/eks-cluster" }',
                ["dev", "prod"],
            ),
        },
        "global": {
            "iam.tf": 'resource "aws_iam_role" "deployer" {}',
            "provider.tf": 'provider "aws" {}',
        },
    }


@pytest.fixture
def multi_account_tree() -> Dict[str, object]:
    """Flat account-X/ directories next to a shared-modules/ directory."""
    def account(main: str) -> Dict[str, str]:
        return {
            "main.tf": main,
            "provider.tf": 'provider "aws" { assume_role { role_arn = "arn:..." } }',
            "backend.tf": 'terraform { backend "s3" {} }',
        }

    return {
        "shared-modules": {
            "networking": {"main.tf": 'resource "aws_vpc" "main" {}'},
            "security": {"main.tf": 'resource "aws_security_group" "main" {}'},
        },
        "account-production": account(
            'module "network" { source = "../shared-modules/networking" }\n'
            'module "security" { source = "../shared-modules/security" }'
        ),
        "account-staging": account('module "network" { source = "../shared-modules/networking" }'),
        "account-dev": account('module "network" { source = "../shared-modules/networking" }'),
        "account-shared-services": account('resource "aws_s3_bucket" "logs" {}'),
    }
