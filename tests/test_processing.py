"""
Processing stage tests.

Run with: pytest tests/test_processing.py -v
"""

import io

import pytest

from epub_core.config.settings import ResourceConfig
from epub_core.domain.resource import Resource
from epub_core.errors import MalformedMarkup
from epub_core.processing.base import (
    IdentityProcessor,
    ProcessResult,
    ResourceProcessor,
    TitleFillProcessor,
    apply_processors,
    process_resources,
)
from epub_core.transform.xslt import XslTransformStage


class ExplodingProcessor(ResourceProcessor):
    """Fails on every resource."""

    def apply(self, resource):
        raise OSError("disk on fire")


class SuffixProcessor(ResourceProcessor):
    """Appends a marker to the content."""

    def apply(self, resource):
        return resource.get_data() + b"<!--done-->"


@pytest.fixture
def stage(rename_p_xslt):
    return XslTransformStage.from_string(rename_p_xslt)


def chapter(text: str, href: str) -> Resource:
    return Resource(
        f"<html><head><title>{text}</title></head><body><p>{text}</p></body></html>".encode("utf-8"),
        href,
    )


class TestApplyProcessors:
    """Running an ordered list of stages on one resource."""

    def test_identity_leaves_content(self):
        resource = chapter("One", "ch1.xhtml")
        before = resource.get_data()
        assert apply_processors(resource, [IdentityProcessor()]) is False
        assert resource.get_data() == before

    def test_no_processors(self, make_store):
        store = make_store({"e": b"abc"})
        resource = Resource.lazy(store, "e", 3, "a.css")
        assert apply_processors(resource, []) is False
        assert store.opened == 0

    def test_title_then_transform(self, stage):
        resource = chapter("One", "ch1.xhtml")
        assert apply_processors(resource, [TitleFillProcessor(), stage]) is True
        assert resource.title == "One"
        assert b"<para>One</para>" in resource.get_data()

    def test_stages_see_previous_output(self, stage):
        resource = chapter("One", "ch1.xhtml")
        apply_processors(resource, [SuffixProcessor(), stage])
        # The comment added by the first stage survives the identity copy
        assert b"<!--done-->" in resource.get_data()

    def test_failure_restores_original(self, stage, make_store):
        """A failing stage leaves the resource as it was."""
        data = b"<html><body><p>Stored</p></body></html>"
        store = make_store({"e": data})
        resource = Resource.lazy(store, "e", len(data), "ch.xhtml")
        with pytest.raises(OSError):
            apply_processors(resource, [stage, ExplodingProcessor()])
        assert not resource.is_initialized()
        assert resource.get_data() == data

    def test_title_processor_from_config(self):
        processor = TitleFillProcessor.from_config(ResourceConfig(title_scan_chunk_size=2, encoding_prefix_size=16))
        assert processor.chunk_size == 2
        assert processor.prefix_size == 16
        resource = chapter("Small Chunks", "ch1.xhtml")
        processor.apply(resource)
        assert resource.title == "Small Chunks"


class TestProcessResources:
    """Running stages over many resources."""

    def test_failure_aborts_only_that_resource(self, stage):
        good_one = chapter("One", "ch1.xhtml")
        bad = Resource(b"<html><body><p>broken</body></html>", "ch2.xhtml")
        good_two = chapter("Two", "ch3.xhtml")
        bad_before = bad.get_data()

        result = process_resources([good_one, bad, good_two], [TitleFillProcessor(), stage])

        assert result.resources_processed == 2
        assert result.resources_changed == 2
        assert result.resources_failed == 1
        assert not result.success
        assert result.errors[0]['href'] == "ch2.xhtml"
        assert result.errors[0]['processor'] == "XslTransformStage"
        assert bad.get_data() == bad_before
        assert b"<para>One</para>" in good_one.get_data()
        assert b"<para>Two</para>" in good_two.get_data()

    def test_load_failure_is_recorded(self, make_store, stage):
        missing = Resource.lazy(make_store({}), "gone", 4, "gone.xhtml")
        result = process_resources([missing], [stage])
        assert result.resources_failed == 1
        assert result.errors[0]['processor'] == "load"

    def test_os_errors_are_recorded(self):
        result = process_resources([Resource(b"x", "a.css")], [ExplodingProcessor()])
        assert result.errors[0]['processor'] == "ExplodingProcessor"
        assert "disk on fire" in result.errors[0]['message']

    def test_non_markup_passes_through(self, stage):
        css = Resource(b"p { color: red }", "style.css")
        result = process_resources([css], [stage])
        assert result.resources_processed == 1
        assert result.resources_changed == 0
        assert css.get_data() == b"p { color: red }"

    def test_metadata_lists_processors(self, stage):
        result = process_resources([], [IdentityProcessor(), stage])
        assert result.metadata['processors'] == ["IdentityProcessor", "XslTransformStage"]


class TestReleasable:
    """Unchanged resources keep their store-backed state."""

    def test_lazy_resource_stays_lazy(self, make_store):
        data = b"<html><head><title>Kept</title></head></html>"
        store = make_store({"e": data})
        resource = Resource.lazy(store, "e", len(data), "ch.xhtml")
        result = process_resources([resource], [IdentityProcessor(), TitleFillProcessor()])
        assert result.resources_changed == 0
        assert resource.title == "Kept"
        assert not resource.is_initialized()

    def test_loaded_resource_can_be_released(self, make_store):
        data = b"<html><body><p>x</p></body></html>"
        store = make_store({"e": data})
        resource = Resource.from_stream(io.BytesIO(data), "ch.xhtml", len(data), store=store, reference="e")
        process_resources([resource], [IdentityProcessor()])
        assert resource.is_initialized()
        resource.release()
        assert not resource.is_initialized()
        assert resource.get_data() == data

    def test_changed_resource_is_in_memory(self, make_store, stage):
        data = b"<html><body><p>x</p></body></html>"
        store = make_store({"e": data})
        resource = Resource.lazy(store, "e", len(data), "ch.xhtml")
        assert apply_processors(resource, [stage]) is True
        resource.release()
        assert resource.is_initialized()
        assert b"<para>x</para>" in resource.get_data()


class TestProcessResult:
    """Result container behaviour."""

    def test_merge(self):
        first = ProcessResult(resources_processed=2, resources_changed=1)
        second = ProcessResult(resources_processed=1)
        second.add_error("ch9.xhtml", "XslTransformStage", "bad markup")
        first.merge(second)
        assert first.resources_processed == 3
        assert first.resources_failed == 1
        assert len(first.errors) == 1

    def test_summary(self):
        result = ProcessResult(resources_processed=1)
        for i in range(7):
            result.add_error(f"ch{i}.xhtml", "XslTransformStage", str(MalformedMarkup("bad")))
        text = result.summary()
        assert "Processing: FAILED" in text
        assert "... and 2 more" in text
