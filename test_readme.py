"""
Tests for the README provider list
"""
from freetier_scraper.config.schema import ServiceRecord
from freetier_scraper.exporters.readme_updater import (
    END_MARKER,
    START_MARKER,
    render_provider_section,
    replace_section,
    update_readme,
)

README = f"""# Free tiers

Intro text.

{START_MARKER}

- Stale entry

{END_MARKER}

Details stay untouched.
"""

def record(name):
    return ServiceRecord(name=name, url="", daily_limit=1, monthly_limit=30, note=None,
                         last_scraped=None, last_changed=None, scraped_successfully=False)

def test_section_lists_sorted_names_with_count():
    section = render_provider_section(["Resend", "Brevo (Sendinblue)", "Mailgun"])

    assert section.startswith(START_MARKER)
    assert "**3 providers**" in section
    assert section.index("- Brevo (Sendinblue)") < section.index("- Mailgun") < section.index("- Resend")

def test_update_replaces_only_the_marked_section(tmp_path):
    path = tmp_path / "README.md"
    path.write_text(README, encoding='utf-8')

    assert update_readme(str(path), [record("Mailgun"), record("Brevo (Sendinblue)")]) is True

    text = path.read_text(encoding='utf-8')
    assert "Stale entry" not in text
    assert "- Brevo (Sendinblue)\n- Mailgun\n" in text
    assert text.startswith("# Free tiers\n\nIntro text.\n\n")
    assert text.endswith(f"{END_MARKER}\n\nDetails stay untouched.\n")

def test_missing_markers_leave_file_unchanged(tmp_path):
    path = tmp_path / "README.md"
    original = f"# Free tiers\n\n{START_MARKER}\n\n- Stale entry\n"
    path.write_text(original, encoding='utf-8')

    assert update_readme(str(path), [record("Mailgun")]) is False
    assert path.read_text(encoding='utf-8') == original

def test_end_marker_before_start_is_not_a_section():
    assert replace_section(f"{END_MARKER}\n{START_MARKER}\n", "new") is None

def test_missing_readme_is_skipped(tmp_path):
    assert update_readme(str(tmp_path / "README.md"), [record("Mailgun")]) is False
