"""Shared fixtures: a small two-journey document built with bitstring."""

import pytest

from document_builder import DocumentSpec, build_document
from samples import sample_spec


@pytest.fixture
def spec() -> DocumentSpec:
    return sample_spec()


@pytest.fixture
def document(spec: DocumentSpec) -> bytes:
    return build_document(spec)


@pytest.fixture
def document_file(tmp_path, document: bytes):
    path = tmp_path / "journeys.bin"
    path.write_bytes(document)
    return path
