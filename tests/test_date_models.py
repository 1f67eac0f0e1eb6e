from modules.date_utils import resolve_datetime


def test_ambiguity_prompt_lists_every_option(reference_now):
    ambiguity = resolve_datetime("06/12/2024", reference_now)
    message = ambiguity.to_user_message()

    assert "The date '06/12/2024' is ambiguous" in message
    assert "A) MM/DD format" in message
    assert "B) DD/MM format" in message
    assert message.endswith("Please specify which date you meant (A, B, etc.)")


def test_get_option_is_forgiving_about_case_and_spaces(reference_now):
    ambiguity = resolve_datetime("06/12/2024", reference_now)
    assert ambiguity.get_option(' b ').key == 'B'
    assert ambiguity.get_option('a').key == 'A'
    assert ambiguity.get_option('C') is None
    assert ambiguity.get_option('') is None
    assert ambiguity.get_option(1) is None


def test_outcomes_are_tagged(reference_now):
    assert resolve_datetime("2024-12-01", reference_now).to_dict()['status'] == 'resolved'
    assert resolve_datetime("06/12/2024", reference_now).to_dict()['status'] == 'ambiguous'
    assert resolve_datetime("not-a-date", reference_now).to_dict()['status'] == 'invalid'


def test_option_dict_hides_raw_datetime(reference_now):
    option = resolve_datetime("06/12/2024", reference_now).options[1]
    assert option.to_dict() == {
        'key': 'B',
        'display_text': "DD/MM format: Friday, December 6, 2024 at 09:00",
        'iso_date': "2024-12-06T09:00:00+01:00",
    }
