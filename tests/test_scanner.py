from __future__ import annotations

import pytest

from reslink.core.scanner import BlockScanner

SKILL_DOC = '''[gd_resource type="Resource" script_class="SkillData" load_steps=5 format=3 uid="uid://skill1"]

[ext_resource type="Script" path="res://scripts/resources/skill_data.gd" id="1_skill"]
[ext_resource type="Script" path="res://scripts/resources/affix.gd" id="2_affix"]
[ext_resource type="Script" path="res://scripts/resources/die_resource.gd" id="3_die"]

[sub_resource type="Resource" id="Resource_a1"]
script = ExtResource("2_affix")
category = "dice_grant"
affix_name = "Grant Fire D6"

[sub_resource type="Resource" id="Resource_a2"]
affix_name = "Holy D8 Ward"
granted_dice = Array[ExtResource("3_die")]([])
category = "dice_grant"

[resource]
script = ExtResource("1_skill")
name = "Fireball"
affixes = [SubResource("Resource_a1"), SubResource("Resource_a2")]
'''


def make_scanner() -> BlockScanner:
    return BlockScanner(name_field='affix_name', category_field='category', target_field='granted_dice')


def test_scan_classifies_lines() -> None:
    result = make_scanner().scan(SKILL_DOC.splitlines())
    assert result.kinds('header') == [0]
    assert result.kinds('external_ref_decl') == [2, 3, 4]
    assert result.kinds('block_start') == [6, 11]
    assert result.kinds('root_marker') == [16]
    assert result.kinds('block_end') == [9, 14, 19]
    assert 7 in result.kinds('block_field')


def test_scan_tracks_block_fields_in_any_order() -> None:
    result = make_scanner().scan(SKILL_DOC.splitlines())
    first, second = result.sub_blocks
    assert (first.start, first.end, first.last_line) == (6, 11, 9)
    assert first.block_id == 'Resource_a1'
    assert first.category_tag == 'dice_grant'
    assert first.name_field == 'Grant Fire D6'
    assert first.already_has_target_field is False
    assert second.name_field == 'Holy D8 Ward'
    assert second.category_tag == 'dice_grant'
    assert second.already_has_target_field is True
    assert result.root is not None
    assert result.root.name_field is None
    assert result.is_flat is False


def test_flat_document_anchors_on_root() -> None:
    text = '''[gd_resource type="Resource" load_steps=2 format=3]

[ext_resource type="Script" path="res://scripts/resources/affix.gd" id="1_affix"]

[resource]
script = ExtResource("1_affix")
affix_name = "Neutral D8 Bonus"
'''
    result = make_scanner().scan(text.splitlines())
    assert result.is_flat
    root = result.root
    assert root is not None
    assert (root.start, root.end, root.last_line) == (4, 7, 6)
    assert root.name_field == 'Neutral D8 Bonus'


def test_body_without_root_marker_is_implicit_root() -> None:
    lines = ['[gd_resource type="Resource" format=3]', '', 'affix_name = "Fire D4"']
    result = make_scanner().scan(lines)
    assert result.is_flat
    assert result.root is not None
    assert result.root.start == 2
    assert result.root.name_field == 'Fire D4'


def test_sections_out_of_order_are_rejected() -> None:
    lines = ['[gd_resource type="Resource" format=3]', '[resource]', '[sub_resource type="Resource" id="x"]']
    with pytest.raises(ValueError):
        make_scanner().scan(lines)


def test_multiline_string_lines_are_not_sections_or_fields() -> None:
    lines = [
        '[gd_resource type="Resource" load_steps=3 format=3]',
        '',
        '[ext_resource type="Script" path="res://scripts/resources/die_resource.gd" id="3_die"]',
        '',
        '[sub_resource type="Resource" id="Resource_a1"]',
        'category = "dice_grant"',
        'description = "Deals fire.',
        '[center]',
        'granted_dice = nothing',
        '',
        'affix_name = \\"fake\\" end"',
        'affix_name = "Grant Fire D6"',
        '',
        '[resource]',
        'name = "Skill"',
    ]
    result = make_scanner().scan(lines)
    block = result.sub_blocks[0]
    assert block.name_field == 'Grant Fire D6'
    assert block.already_has_target_field is False
    assert (block.last_line, block.end) == (11, 13)
    assert result.kinds('block_field') == [5, 6, 11, 14]
    assert result.kinds('root_marker') == [13]
