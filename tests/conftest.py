"""
Shared fixtures for epub_core tests.
"""

import io
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from epub_core.errors import StoreUnavailable
from epub_core.store.base import ResourceStore


class MemoryStore(ResourceStore):
    """In-memory store that counts opened and closed streams."""

    def __init__(self, entries):
        self.entries = dict(entries)
        self.opened = 0
        self.closed = 0

    def open(self, reference):
        if reference not in self.entries:
            raise StoreUnavailable(f"No entry named {reference}")
        self.opened += 1
        return io.BytesIO(self.entries[reference])

    def close(self, stream):
        self.closed += 1
        super().close(stream)


@pytest.fixture
def make_store():
    """Factory for in-memory stores."""
    return MemoryStore


RENAME_P_XSLT = """<?xml version="1.0"?>
<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:param name="lang" select="''"/>
  <xsl:template match="@*|node()">
    <xsl:copy><xsl:apply-templates select="@*|node()"/></xsl:copy>
  </xsl:template>
  <xsl:template match="p">
    <para><xsl:apply-templates select="@*|node()"/></para>
  </xsl:template>
  <xsl:template match="body">
    <body>
      <xsl:if test="$lang != ''">
        <xsl:attribute name="lang"><xsl:value-of select="$lang"/></xsl:attribute>
      </xsl:if>
      <xsl:apply-templates select="@*|node()"/>
    </body>
  </xsl:template>
</xsl:stylesheet>
"""


@pytest.fixture
def rename_p_xslt():
    """Stylesheet renaming <p> to <para> and copying everything else."""
    return RENAME_P_XSLT


@pytest.fixture
def rename_p_path(tmp_path):
    """The rename stylesheet written to a file."""
    path = tmp_path / "rename.xsl"
    path.write_text(RENAME_P_XSLT, encoding="utf-8")
    return path
