"""Test LicenseAggregator."""

import pytest

from kiln.core.errors import MetadataError
from kiln.metadata.license import LicenseAggregator
from kiln.metadata.models import Dependency, DependencyGraph


HEADER = (
    "Nitrokey 3: third-party dependency licenses\n"
    "===========================================\n"
)


def test_empty_graph_yields_well_formed_report():
    report = LicenseAggregator("Nitrokey 3").aggregate(DependencyGraph())

    assert report.dependency_count == 0
    assert report.content.startswith(HEADER)
    assert report.content.strip().splitlines()[-1].startswith("=")


def test_dependencies_sorted_by_name_then_version():
    graph = DependencyGraph(
        dependencies=[
            Dependency(name="serde", version="1.0.190", license="MIT OR Apache-2.0"),
            Dependency(name="heapless", version="0.8.0", license="MIT OR Apache-2.0"),
            Dependency(name="heapless", version="0.7.16", license="MIT OR Apache-2.0"),
        ]
    )

    report = LicenseAggregator("Nitrokey 3").aggregate(graph)

    body = report.content[len(HEADER):].strip().splitlines()
    assert [line.split()[0:2] for line in body] == [
        ["heapless", "0.7.16"],
        ["heapless", "0.8.0"],
        ["serde", "1.0.190"],
    ]
    assert all(line.endswith("MIT OR Apache-2.0") for line in body)
    assert report.dependency_count == 3


def test_license_file_used_when_no_expression():
    graph = DependencyGraph(
        dependencies=[Dependency(name="ring", version="0.17.5", license_file="LICENSE")]
    )

    report = LicenseAggregator("Nitrokey 3").aggregate(graph)

    assert "see LICENSE" in report.content


def test_missing_license_metadata_is_an_error():
    graph = DependencyGraph(
        dependencies=[
            Dependency(name="littlefs2", version="0.4.0", license="MIT"),
            Dependency(name="mystery", version="0.1.0"),
        ]
    )

    with pytest.raises(MetadataError, match="mystery 0.1.0") as exc_info:
        LicenseAggregator("Nitrokey 3").aggregate(graph)

    assert exc_info.value.generator == "license"
    assert exc_info.value.context["missing"] == ["mystery"]


def test_report_is_deterministic():
    deps = [
        Dependency(name="b", version="1.0.0", license="MIT"),
        Dependency(name="a", version="2.0.0", license="Apache-2.0"),
    ]
    aggregator = LicenseAggregator("Nitrokey 3")

    first = aggregator.aggregate(DependencyGraph(dependencies=deps))
    second = aggregator.aggregate(DependencyGraph(dependencies=list(reversed(deps))))

    assert first.content == second.content
