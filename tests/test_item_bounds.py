from shelfscan.domain.receipt import BoundingBox, Vertex, WordAnnotation
from shelfscan.receipt.ocr_parser.bounds import find_item_bounds


def _word(text: str, x0: int, y0: int, x1: int, y1: int) -> WordAnnotation:
    return WordAnnotation(text, (Vertex(x0, y0), Vertex(x1, y0), Vertex(x1, y1), Vertex(x0, y1)))


def test_no_match_returns_empty_sentinel() -> None:
    bounds = find_item_bounds([_word("blob", 0, 0, 500, 500), _word("MILK", 10, 10, 50, 20)], ["BREAD"])

    assert bounds == BoundingBox.EMPTY
    assert bounds.is_empty


def test_whole_text_annotation_is_ignored() -> None:
    bounds = find_item_bounds([_word("BREAD $2.49", 0, 0, 500, 500)], ["BREAD"])

    assert bounds.is_empty


def test_split_tokens_are_unioned_and_padded() -> None:
    annotations = [
        _word("WHOLE MILK $3.99", 0, 0, 500, 500),
        _word("WHOLE", 100, 200, 160, 220),
        _word("MILK", 170, 202, 220, 224),
        _word("$3.99", 400, 240, 460, 260),
    ]

    bounds = find_item_bounds(annotations, ["WHOLE MILK", "$3.99"])

    assert bounds == BoundingBox(95, 195, 465, 265)
    assert bounds.width == 370
    assert bounds.height == 70


def test_annotation_containing_fragment_matches() -> None:
    annotations = [_word("blob", 0, 0, 1, 1), _word("BANANAS$0.69", 50, 60, 120, 80)]

    assert find_item_bounds(annotations, ["BANANAS"]) == BoundingBox(45, 55, 125, 85)


def test_min_corner_is_clamped_at_zero() -> None:
    annotations = [_word("blob", 0, 0, 1, 1), _word("EGGS", 2, 3, 40, 20)]

    assert find_item_bounds(annotations, ["EGGS"]) == BoundingBox(0, 0, 45, 25)


def test_empty_fragments_and_texts_never_match() -> None:
    annotations = [_word("blob", 0, 0, 1, 1), _word("", 10, 10, 20, 20)]

    assert find_item_bounds(annotations, ["", "  "]).is_empty
    assert find_item_bounds(annotations, ["EGGS"]).is_empty
