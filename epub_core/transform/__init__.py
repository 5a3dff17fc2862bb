"""
Transformation Framework
========================

XSLT transform stage for package resources.

Components:
- XslTransformStage: Processing stage applying a compiled stylesheet
- BlockingResolver: Entity resolver that never fetches external content
- XhtmlEntityResolver: Default resolver serving the XHTML character entities
- parse_xslt_document / compile_xslt: Stylesheet loading helpers
"""

from epub_core.transform.xslt import (
    XslTransformStage,
    BlockingResolver,
    XhtmlEntityResolver,
    parse_xslt_document,
    compile_xslt,
)

__all__ = [
    "XslTransformStage",
    "BlockingResolver",
    "XhtmlEntityResolver",
    "parse_xslt_document",
    "compile_xslt",
]
