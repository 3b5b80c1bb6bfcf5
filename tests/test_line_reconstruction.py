import random

from smartscan.ocr_pipeline import reconstruct_lines
from smartscan.ocr_pipeline.lines import same_line
from smartscan.ocr_pipeline.mocks import fragment, sheet_fragments


def test_no_fragments_yields_no_lines():
    assert reconstruct_lines([]) == []


def test_single_fragment_yields_single_line():
    lines = reconstruct_lines([fragment("T/UDOM/2021/001", x=10, y=10)])

    assert len(lines) == 1
    assert lines[0].texts == ["T/UDOM/2021/001"]


def test_rows_are_grouped_top_to_bottom_and_sorted_left_to_right():
    fragments = [
        fragment("78", x=300, y=12),
        fragment("T/UDOM/2021/002", x=10, y=60),
        fragment("T/UDOM/2021/001", x=10, y=10),
        fragment("64", x=300, y=58),
    ]

    lines = reconstruct_lines(fragments)

    assert [line.texts for line in lines] == [
        ["T/UDOM/2021/001", "78"],
        ["T/UDOM/2021/002", "64"],
    ]


def test_threshold_is_relative_to_fragment_height():
    tall_a = fragment("A", x=0, y=0, height=40)
    tall_b = fragment("B", x=50, y=20, height=40)
    short_a = fragment("A", x=0, y=0, height=10)
    short_b = fragment("B", x=50, y=20, height=10)

    # Same 20px offset: within 0.7 * 40 but not within 0.7 * 10.
    assert same_line(tall_a, tall_b)
    assert not same_line(short_a, short_b)


def test_near_threshold_offsets():
    base = fragment("A", x=0, y=0, height=20)

    assert same_line(base, fragment("B", x=50, y=13, height=20))
    assert not same_line(base, fragment("B", x=50, y=15, height=20))


def test_skewed_row_is_followed_fragment_to_fragment():
    fragments = [
        fragment("Jane", x=10, y=10),
        fragment("Doe", x=120, y=20),
        fragment("45", x=230, y=30),
    ]

    lines = reconstruct_lines(fragments)

    # First and last are 20px apart, but each step is only 10px.
    assert [line.texts for line in lines] == [["Jane", "Doe", "45"]]


def test_grid_sheet_produces_one_line_per_row():
    rows = [["Student ID", "Mark"], ["A/1", "10"], ["A/2", "20"], ["A/3", "30"]]

    lines = reconstruct_lines(sheet_fragments(rows))

    assert [line.texts for line in lines] == rows


def test_every_fragment_lands_in_exactly_one_line():
    rng = random.Random(1234)
    for _ in range(25):
        fragments = [
            fragment(
                f"t{index}",
                x=rng.uniform(0, 800),
                y=rng.uniform(0, 1200),
                width=rng.uniform(5, 120),
                height=rng.uniform(5, 40),
            )
            for index in range(rng.randint(0, 40))
        ]

        lines = reconstruct_lines(fragments)

        emitted = sorted(f.text for line in lines for f in line.fragments)
        assert emitted == sorted(f.text for f in fragments)
        assert all(line.fragments for line in lines)
        for line in lines:
            xs = [f.bounding_box.x for f in line.fragments]
            assert xs == sorted(xs)
