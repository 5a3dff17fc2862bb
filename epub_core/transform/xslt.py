"""
XSLT Transform Stage
====================

Applies a compiled XSLT stylesheet to the XHTML resources of a package.

The stylesheet is compiled once and reused for every resource. Documents
are parsed from the resource's decoded text with network access disabled;
external DTDs and entities go through an lxml resolver supplied by the
caller (by default one that serves the XHTML character entities and
resolves everything else to an empty document).
"""

import contextlib
import io
import logging
import threading
from html.entities import name2codepoint
from pathlib import Path
from typing import IO, Optional, Union

from lxml import etree

from epub_core.config.settings import TransformConfig
from epub_core.domain.resource import Resource
from epub_core.errors import InvalidProgram, MalformedMarkup, TransformFailure
from epub_core.media.types import is_markup
from epub_core.processing.base import ResourceProcessor

logger = logging.getLogger(__name__)

ProgramSource = Union[str, Path, IO]


class BlockingResolver(etree.Resolver):
    """Resolves every external DTD or entity to an empty document."""

    def resolve(self, system_url, public_id, context):
        logger.debug(f"Blocked external entity: {public_id or ''} {system_url}")
        return self.resolve_string("", context)


XHTML_PUBLIC_IDS = frozenset([
    "-//W3C//DTD XHTML 1.0 Strict//EN",
    "-//W3C//DTD XHTML 1.0 Transitional//EN",
    "-//W3C//DTD XHTML 1.0 Frameset//EN",
    "-//W3C//DTD XHTML 1.1//EN",
    "-//W3C//DTD XHTML Basic 1.1//EN",
    "-//W3C//DTD XHTML 1.1 plus MathML 2.0//EN",
    "-//W3C//DTD XHTML 1.1 plus MathML 2.0 plus SVG 1.1//EN",
])

_XHTML_SYSTEM_PREFIX = "http://www.w3.org/TR/xhtml"

# Predefined by XML itself
_XML_PREDEFINED = frozenset(["amp", "lt", "gt", "quot", "apos"])

XHTML_ENTITIES_DTD = "\n".join(
    f'<!ENTITY {name} "&#{codepoint};">'
    for name, codepoint in sorted(name2codepoint.items())
    if name not in _XML_PREDEFINED
)


class XhtmlEntityResolver(BlockingResolver):
    """
    Serves the XHTML named character entities for XHTML DTDs.

    Documents declaring one of the XHTML 1.x doctypes get a local DTD that
    defines ``&nbsp;``, ``&eacute;`` and the other HTML 4 entities. Any
    other external reference resolves to an empty document; nothing is
    fetched from the network or the file system.
    """

    def resolve(self, system_url, public_id, context):
        if public_id in XHTML_PUBLIC_IDS or (system_url or "").startswith(_XHTML_SYSTEM_PREFIX):
            logger.debug(f"Serving XHTML entities for {public_id or system_url}")
            return self.resolve_string(XHTML_ENTITIES_DTD, context)
        return super().resolve(system_url, public_id, context)


def _make_parser(resolver: etree.Resolver, allow_network: bool = False, **kwargs) -> etree.XMLParser:
    parser = etree.XMLParser(no_network=not allow_network, **kwargs)
    parser.resolvers.add(resolver)
    return parser


def parse_xslt_document(xslt_source: ProgramSource,
                        resolver: Optional[etree.Resolver] = None,
                        allow_network: bool = False) -> etree._ElementTree:
    """
    Parse an XSLT stylesheet without compiling it.

    Args:
        xslt_source: Path to the stylesheet or an open file object
        resolver: Resolver for xsl:import/xsl:include and entities
        allow_network: Whether the stylesheet may read over the network

    Returns:
        Stylesheet document

    Raises:
        FileNotFoundError: If the stylesheet path is empty or not a file
        InvalidProgram: If the stylesheet is not well-formed XML
    """
    if isinstance(xslt_source, (str, Path)):
        if isinstance(xslt_source, str) and not xslt_source.strip():
            raise FileNotFoundError("No XSLT stylesheet path given")
        xslt_path = Path(xslt_source)
        if not xslt_path.is_file():
            raise FileNotFoundError(f"XSLT stylesheet not found: {xslt_path}")
        logger.info(f"Loading XSLT stylesheet: {xslt_path}")
        xslt_source = str(xslt_path)

    parser = _make_parser(resolver or BlockingResolver(), allow_network)
    try:
        return etree.parse(xslt_source, parser)
    except etree.XMLSyntaxError as e:
        raise InvalidProgram(f"XSLT stylesheet is not well-formed: {e}") from e


def compile_xslt(xslt_doc: etree._ElementTree, allow_network: bool = False) -> etree.XSLT:
    """
    Compile a parsed stylesheet.

    Raises:
        InvalidProgram: If the stylesheet is not valid XSLT
    """
    access = etree.XSLTAccessControl(
        read_network=allow_network,
        write_network=False,
        write_file=False,
        create_dir=False,
    )
    try:
        transform = etree.XSLT(xslt_doc, access_control=access)
    except etree.XSLTParseError as e:
        raise InvalidProgram(f"XSLT stylesheet failed to compile: {e}") from e
    logger.info("XSLT stylesheet loaded successfully")
    return transform


class XslTransformStage(ResourceProcessor):
    """
    Processing stage that rewrites XHTML resources with an XSLT stylesheet.

    Calls on one instance are serialized with a lock unless ``serialize``
    is False. For parallel workers, give each worker its own stage with
    :meth:`for_worker`.

    Example:
        stage = XslTransformStage(Path("cleanup.xsl"))
        new_bytes = stage.transform(chapter)
        chapter.set_data(new_bytes)
    """

    def __init__(self,
                 program: ProgramSource,
                 entity_resolver: Optional[etree.Resolver] = None,
                 serialize: bool = True,
                 allow_network: bool = False,
                 pretty_print: bool = False,
                 log: Optional[logging.Logger] = None):
        """
        Compile the stylesheet.

        Args:
            program: Path to the stylesheet or an open file object
            entity_resolver: Resolver for external DTDs and entities
            serialize: Guard transform calls with a lock
            allow_network: Allow network access while parsing
            pretty_print: Indent the serialized output

        Raises:
            FileNotFoundError: If the stylesheet path doesn't exist
            InvalidProgram: If the stylesheet is malformed
        """
        self.entity_resolver = entity_resolver or XhtmlEntityResolver()
        self.serialize = serialize
        self.allow_network = allow_network
        self.pretty_print = pretty_print
        self.log = log or logger
        self._program_doc = parse_xslt_document(program, self.entity_resolver, allow_network)
        self._program = compile_xslt(self._program_doc, allow_network)
        self._lock = threading.Lock()

    @classmethod
    def from_string(cls, xslt_string: Union[str, bytes], **kwargs) -> 'XslTransformStage':
        """Compile a stylesheet given as a string."""
        if isinstance(xslt_string, str):
            xslt_string = xslt_string.encode("utf-8")
        return cls(io.BytesIO(xslt_string), **kwargs)

    @classmethod
    def from_config(cls, config: TransformConfig, **kwargs) -> 'XslTransformStage':
        """Create a stage from the transform section of the pipeline config."""
        kwargs.setdefault("serialize", config.serialize_transforms)
        kwargs.setdefault("allow_network", config.allow_network)
        kwargs.setdefault("pretty_print", config.pretty_print)
        return cls(config.xslt_path, **kwargs)

    def for_worker(self) -> 'XslTransformStage':
        """Return a stage with its own compiled copy of the stylesheet."""
        clone = object.__new__(type(self))
        clone.entity_resolver = self.entity_resolver
        clone.serialize = self.serialize
        clone.allow_network = self.allow_network
        clone.pretty_print = self.pretty_print
        clone.log = self.log
        clone._program_doc = self._program_doc
        clone._program = compile_xslt(self._program_doc, self.allow_network)
        clone._lock = threading.Lock()
        return clone

    def _guard(self):
        return self._lock if self.serialize else contextlib.nullcontext()

    def _parse(self, resource: Resource) -> etree._ElementTree:
        try:
            with resource.get_reader(errors="strict") as reader:
                text = reader.read()
        except UnicodeDecodeError as e:
            raise MalformedMarkup(f"Cannot decode {resource.href}: {e}") from e

        # Text is already decoded; the override ignores the declared encoding
        parser = _make_parser(
            self.entity_resolver,
            self.allow_network,
            encoding="utf-8",
            load_dtd=True,
            resolve_entities=True,
        )
        try:
            return etree.parse(io.BytesIO(text.encode("utf-8")), parser)
        except etree.XMLSyntaxError as e:
            raise MalformedMarkup(f"Cannot parse {resource.href}: {e}") from e

    def _serialize(self, result: etree._XSLTResultTree) -> bytes:
        if result.getroot() is None:
            # Text output method
            return str(result).encode("utf-8")
        return etree.tostring(
            result,
            encoding="UTF-8",
            xml_declaration=True,
            pretty_print=self.pretty_print,
        )

    def transform(self, resource: Resource, **params) -> bytes:
        """
        Apply the stylesheet to a markup resource.

        The resource itself is not modified.

        Args:
            resource: XHTML resource to transform
            **params: XSLT string parameters

        Returns:
            Transformed document as UTF-8 bytes

        Raises:
            MalformedMarkup: If the resource cannot be decoded or parsed
            TransformFailure: If the stylesheet fails on this document
            ResourceIOError: If the resource content cannot be read
        """
        doc = self._parse(resource)
        xslt_params = {k: etree.XSLT.strparam(str(v)) for k, v in params.items()}

        with self._guard():
            self.log.info(f"Applying XSLT transformation to {resource.href}")
            try:
                result = self._program(doc, **xslt_params)
            except etree.XSLTApplyError as e:
                self.log.error(f"XSLT transformation failed for {resource.href}: {e}")
                self.log.error(f"Error log: {self._program.error_log}")
                raise TransformFailure(f"Transformation of {resource.href} failed: {e}") from e

            if self._program.error_log:
                self.log.warning("XSLT transformation completed with warnings:")
                for entry in self._program.error_log:
                    self.log.warning(f"  {entry}")

        return self._serialize(result)

    def apply(self, resource: Resource) -> bytes:
        """Transform XHTML resources; other resources pass through unchanged."""
        if not is_markup(resource.media_type):
            return resource.get_data()
        return self.transform(resource)
