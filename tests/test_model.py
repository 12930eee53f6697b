import copy
import io
import json

import pytest

from orcid_works.model import (
    Citation,
    ExternalIds,
    ModelError,
    OrcidWorkDetail,
    OrcidWorkDetailFile,
    OrcidWorks,
    OrcidWorkSummary,
    Source,
    SourceRef,
    Title,
    Value,
    null_to_empty_list,
)

ORCID_ID = "0000-0000-0000-0000"


def make_summary(put_code=1001):
    return {
        "put-code": put_code,
        "created-date": {"value": 1600000000000},
        "last-modified-date": {"value": 1600000000500},
        "source": {
            "source-orcid": {
                "uri": f"https://orcid.org/{ORCID_ID}",
                "path": ORCID_ID,
                "host": "orcid.org",
            },
            "source-name": {"value": "Sample Author"},
        },
        "title": {"title": {"value": "A Sample Work"}},
        "external-ids": {
            "external-id": [
                {
                    "external-id-type": "doi",
                    "external-id-value": "10.1000/sample",
                    "external-id-url": {"value": "https://doi.example.com/10.1000/sample"},
                    "external-id-relationship": "self",
                }
            ]
        },
        "type": "journal-article",
        "publication-date": {"year": {"value": "2020"}, "month": {"value": "05"}},
        "visibility": "public",
        "path": f"/{ORCID_ID}/work/{put_code}",
        "display-index": "1",
    }


def make_detail(put_code=1001):
    data = make_summary(put_code)
    data.update(
        {
            "journal-title": {"value": "Journal of Samples"},
            "short-description": "An abstract.",
            "citation": {"citation-type": "bibtex", "citation-value": "@article{x}"},
            "url": {"value": "https://example.com/work"},
            "contributors": {
                "contributor": [
                    {
                        "credit-name": {"value": "Sample Author"},
                        "contributor-attributes": {
                            "contributor-sequence": "first",
                            "contributor-role": "author",
                        },
                    }
                ]
            },
            "language-code": "en",
            "country": {"value": "US"},
        }
    )
    return data


def make_works():
    return {
        "last-modified-date": {"value": 1600000000500},
        "group": [
            {
                "last-modified-date": {"value": 1600000000500},
                "external-ids": {"external-id": []},
                "work-summary": [make_summary(1001), make_summary(1002)],
            }
        ],
        "path": f"/{ORCID_ID}/works",
    }


def test_summary_round_trip():
    data = make_summary()
    summary = OrcidWorkSummary.from_dict(data)
    assert summary.to_dict() == data


def test_summary_fields():
    summary = OrcidWorkSummary.from_dict(make_summary(42))
    assert summary.put_code == 42
    assert summary.work_type == "journal-article"
    assert summary.title.title == Value("A Sample Work")
    assert summary.publication_date.year.value == "2020"
    assert summary.publication_date.day is None
    assert summary.external_ids.external_id[0].external_id_type == "doi"


def test_detail_round_trip_flattens_summary():
    data = make_detail()
    detail = OrcidWorkDetail.from_dict(data)
    assert detail.summary == OrcidWorkSummary.from_dict(make_summary())
    assert detail.citation == Citation("bibtex", "@article{x}")
    assert detail.to_dict() == data


def test_detail_without_optional_fields_omits_them():
    data = make_summary()
    detail = OrcidWorkDetail.from_dict(data)
    assert detail.journal_title is None
    assert detail.contributors is None
    assert detail.to_dict() == data


def test_optional_null_becomes_none_and_is_omitted():
    data = make_summary()
    data["external-ids"] = {"external-id": None}
    data["display-index"] = None
    summary = OrcidWorkSummary.from_dict(data)
    assert summary.external_ids == ExternalIds(None)
    assert summary.display_index is None
    dumped = summary.to_dict()
    assert dumped["external-ids"] == {}
    assert "display-index" not in dumped


def test_unknown_fields_are_ignored():
    data = make_summary()
    data["extra-field"] = {"anything": [1, 2]}
    summary = OrcidWorkSummary.from_dict(data)
    assert summary == OrcidWorkSummary.from_dict(make_summary())


def test_source_ref_all_optional():
    assert SourceRef.from_dict({}) == SourceRef()
    assert Source.from_dict({}).to_dict() == {}


def test_missing_required_field_raises():
    data = make_summary()
    del data["visibility"]
    with pytest.raises(ModelError) as info:
        OrcidWorkSummary.from_dict(data)
    assert "visibility" in info.value.message


def test_missing_nested_field_reports_path():
    data = make_works()
    del data["group"][0]["work-summary"][1]["put-code"]
    with pytest.raises(ModelError) as info:
        OrcidWorks.from_dict(data)
    assert info.value.segments == ("group", 0, "work-summary", 1)
    assert info.value.path == "group[0].work-summary[1]"


def test_wrong_type_reports_path():
    data = make_summary()
    data["title"]["title"]["value"] = 5
    with pytest.raises(ModelError) as info:
        OrcidWorkSummary.from_dict(data)
    assert info.value.segments == ("title", "title", "value")


@pytest.mark.parametrize("bad", [-1, 2**64, True, 1.5, "1001", None])
def test_put_code_must_be_unsigned_integer(bad):
    data = make_summary()
    data["put-code"] = bad
    with pytest.raises(ModelError) as info:
        OrcidWorkSummary.from_dict(data)
    assert info.value.segments == ("put-code",)


def test_non_object_input_rejected():
    with pytest.raises(ModelError):
        Title.from_dict(["not", "an", "object"])


def test_works_round_trip_and_summaries():
    data = make_works()
    works = OrcidWorks.from_dict(data)
    codes = [s.put_code for g in works.group for s in g.work_summary]
    assert codes == [1001, 1002]
    assert works.to_dict() == data


def test_works_from_reader_text_and_bytes():
    text = json.dumps(make_works())
    from_text = OrcidWorks.from_reader(io.StringIO(text))
    from_bytes = OrcidWorks.from_reader(io.BytesIO(text.encode("utf-8")))
    assert from_text == from_bytes
    assert from_text.path == f"/{ORCID_ID}/works"


def test_detail_from_reader():
    detail = OrcidWorkDetail.from_reader(io.StringIO(json.dumps(make_detail(7))))
    assert detail.summary.put_code == 7
    assert detail.language_code == "en"


def test_from_reader_invalid_json():
    with pytest.raises(ModelError):
        OrcidWorkDetailFile.from_reader(io.StringIO("{not json"))


def test_detail_file_round_trip():
    data = {"records": [make_detail(3), make_detail(1)]}
    detail_file = OrcidWorkDetailFile.from_reader(io.StringIO(json.dumps(data)))
    assert detail_file.to_dict() == data


def test_into_map_orders_by_put_code():
    detail_file = OrcidWorkDetailFile.from_dict(
        {"records": [make_detail(30), make_detail(10), make_detail(20)]}
    )
    mapping = detail_file.into_map()
    assert list(mapping) == [10, 20, 30]
    assert all(code == d.summary.put_code for code, d in mapping.items())


def test_into_map_ignores_record_order():
    first = OrcidWorkDetailFile.from_dict({"records": [make_detail(1), make_detail(2)]})
    second = OrcidWorkDetailFile.from_dict({"records": [make_detail(2), make_detail(1)]})
    assert first != second
    assert first.into_map() == second.into_map()


def test_into_map_later_duplicate_wins():
    later = make_detail(5)
    later["short-description"] = "second"
    detail_file = OrcidWorkDetailFile.from_dict({"records": [make_detail(5), later]})
    mapping = detail_file.into_map()
    assert len(mapping) == 1
    assert mapping[5].short_description == "second"


def test_to_dict_does_not_alias_input():
    data = make_detail()
    original = copy.deepcopy(data)
    detail = OrcidWorkDetail.from_dict(data)
    dumped = detail.to_dict()
    dumped["title"]["title"]["value"] = "changed"
    assert data == original
    assert detail.summary.title.title.value == "A Sample Work"


def test_null_to_empty_list():
    assert null_to_empty_list(None) == []
    assert null_to_empty_list([1, 2]) == [1, 2]
    with pytest.raises(ModelError):
        null_to_empty_list("abc")


def test_model_error_str_includes_path():
    data = make_summary()
    data["source"]["source-name"] = {"other": "x"}
    with pytest.raises(ModelError) as info:
        OrcidWorkSummary.from_dict(data)
    assert str(info.value).startswith("source.source-name: ")
    assert isinstance(info.value, ValueError)