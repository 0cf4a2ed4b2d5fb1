from pathlib import Path

import pytest

import cordahtlc

LICENSE_HEADER = "# SPDX-License-Identifier: AGPL-3.0-or-later\n"

SOURCES = sorted(Path(cordahtlc.__file__).parent.glob("*.py"))


@pytest.mark.parametrize("path", SOURCES, ids=lambda p: p.name)
def test_source_carries_license_header(path):
    assert path.read_text().startswith(LICENSE_HEADER)


def test_public_names_resolve():
    for name in cordahtlc.__all__:
        assert hasattr(cordahtlc, name), name
