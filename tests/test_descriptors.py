from __future__ import annotations

import json
from pathlib import Path

import pytest

from wasmjsgen.descriptors import DescriptorError, load_descriptor_set, parse_descriptor_set

LIBRARY_YAML = """\
files:
  - path: library/v1/library.proto
    package: library.v1
    options: {go_package: "example.com/gen/library/v1;libraryv1"}
    services:
      - name: LibraryService
        comment: Books and shelves.
        methods:
          - {name: FindBooks, input: FindBooksRequest, output: FindBooksResponse}
          - name: Watch
            input: FindBooksRequest
            output: .library.v1.Book
            server_streaming: true
            options: {async_method: true}
    messages:
      - name: FindBooksRequest
        fields:
          - {name: query, number: 1, type: string}
          - {name: genre, number: 2, type: Genre}
      - name: FindBooksResponse
        fields:
          - {name: books, number: 1, type: Book, label: repeated}
      - name: Book
        oneofs: [source]
        fields:
          - {name: title, number: 1, type: string}
          - {name: tags, number: 2, map: {key: string, value: int32}}
          - {name: isbn, number: 3, type: string, oneof: 0}
          - {name: chapter, number: 4, type: Chapter}
        messages:
          - name: Chapter
            fields:
              - {name: heading, number: 1, type: string}
    enums:
      - {name: Genre, values: [GENRE_UNSPECIFIED, GENRE_FICTION]}
  - path: google/protobuf/timestamp.proto
    package: google.protobuf
    generate: false
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_load_yaml_descriptor_set(tmp_path: Path) -> None:
    files = load_descriptor_set(_write(tmp_path, "schemas.yml", LIBRARY_YAML))

    assert [f.path for f in files] == [
        "library/v1/library.proto",
        "google/protobuf/timestamp.proto",
    ]
    library, wkt = files
    assert library.options["go_package"] == "example.com/gen/library/v1;libraryv1"
    assert wkt.generate is False

    service = library.services[0]
    assert service.comment == "Books and shelves."
    find, watch = service.methods
    assert find.input_type == "library.v1.FindBooksRequest"
    assert watch.output_type == "library.v1.Book"
    assert watch.server_streaming
    assert watch.options == {"async_method": True}


def test_bare_type_names_resolve_to_messages_and_enums(tmp_path: Path) -> None:
    (library, _) = load_descriptor_set(_write(tmp_path, "schemas.yaml", LIBRARY_YAML))
    messages = {m.name: m for m in library.messages}

    genre = messages["FindBooksRequest"].fields[1]
    assert (genre.type, genre.type_name) == ("enum", "library.v1.Genre")

    books = messages["FindBooksResponse"].fields[0]
    assert (books.type, books.type_name, books.repeated) == ("message", "library.v1.Book", True)

    chapter = messages["Book"].fields[3]
    assert chapter.type_name == "library.v1.Book.Chapter"


def test_map_shorthand_synthesizes_entry_message(tmp_path: Path) -> None:
    (library, _) = load_descriptor_set(_write(tmp_path, "schemas.yaml", LIBRARY_YAML))
    book = next(m for m in library.messages if m.name == "Book")

    tags = book.fields[1]
    assert tags.type == "message"
    assert tags.type_name == "library.v1.Book.TagsEntry"
    assert tags.repeated

    entry = next(m for m in book.messages if m.name == "TagsEntry")
    assert entry.map_entry
    assert [(f.name, f.number, f.type) for f in entry.fields] == [
        ("key", 1, "string"),
        ("value", 2, "int32"),
    ]


def test_oneof_index_and_enum_positions(tmp_path: Path) -> None:
    (library, _) = load_descriptor_set(_write(tmp_path, "schemas.yaml", LIBRARY_YAML))
    book = next(m for m in library.messages if m.name == "Book")
    assert book.fields[2].oneof == "source"
    assert [(v.name, v.number) for v in library.enums[0].values] == [
        ("GENRE_UNSPECIFIED", 0),
        ("GENRE_FICTION", 1),
    ]


def test_load_json_descriptor_set(tmp_path: Path) -> None:
    document = {
        "files": [
            {
                "path": "a/v1/a.proto",
                "package": "a.v1",
                "messages": [{"name": "Ping", "fields": [{"name": "id", "number": 1, "type": "int64"}]}],
            }
        ]
    }
    files = load_descriptor_set(_write(tmp_path, "schemas.json", json.dumps(document)))
    assert files[0].messages[0].fields[0].type == "int64"


def test_unknown_references_are_left_as_written() -> None:
    files = parse_descriptor_set(
        {
            "files": [
                {
                    "path": "a.proto",
                    "package": "a",
                    "services": [
                        {"name": "S", "methods": [{"name": "M", "input": "b.Req", "output": "b.Res"}]}
                    ],
                }
            ]
        }
    )
    assert files[0].services[0].methods[0].input_type == "b.Req"


def test_empty_document() -> None:
    assert parse_descriptor_set(None) == []
    assert parse_descriptor_set({"files": []}) == []


@pytest.mark.parametrize(
    "document, message",
    [
        (["not", "a", "mapping"], "must be a mapping"),
        ({"files": {"path": "a.proto"}}, "'files' must be a list"),
        ({"files": [{"package": "a"}]}, "missing a path"),
        (
            {"files": [{"path": "a.proto", "services": [{"name": "S", "methods": [{"name": "M", "input": "X"}]}]}]},
            "missing 'output'",
        ),
        (
            {"files": [{"path": "a.proto", "messages": [{"name": "M", "fields": [{"name": "f", "type": "string"}]}]}]},
            "missing a number",
        ),
        (
            {"files": [{"path": "a.proto", "messages": [{"name": "M", "fields": [{"name": "f", "number": 1, "type": "message"}]}]}]},
            "needs a type_name",
        ),
        (
            {"files": [{"path": "a.proto", "messages": [{"name": "M", "fields": [{"name": "f", "number": 1, "map": {"key": "Book", "value": "string"}}]}]}]},
            "scalar key",
        ),
        (
            {"files": [{"path": "a.proto", "messages": [{"name": "M", "fields": [{"name": "f", "number": 1, "type": "string", "oneof": 2}]}]}]},
            "unknown oneof index",
        ),
    ],
)
def test_malformed_documents_raise(document: object, message: str) -> None:
    with pytest.raises(DescriptorError, match=message):
        parse_descriptor_set(document)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(DescriptorError, match="cannot read descriptor set"):
        load_descriptor_set(tmp_path / "missing.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    with pytest.raises(DescriptorError, match="failed to parse"):
        load_descriptor_set(_write(tmp_path, "bad.yaml", "files: [unclosed\n"))
