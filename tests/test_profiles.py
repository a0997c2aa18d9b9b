"""
Unit tests for profile extraction
"""

import pytest
from datetime import datetime

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from job_match.profiles import (
    calculate_duration,
    extract_candidate_profile,
    extract_job_profile,
    get_education_level,
    parse_grade,
)


class TestCalculateDuration:
    """Test cases for experience durations"""

    def test_closed_period(self):
        assert calculate_duration('2020-01-15', '2021-03-01') == 14

    def test_ongoing_period_uses_now(self):
        now = datetime(2024, 6, 1)
        assert calculate_duration('2024-01-01', None, now=now) == 5

    def test_end_before_start_is_zero(self):
        assert calculate_duration('2022-05-01', '2021-01-01') == 0

    def test_missing_start_is_zero(self):
        assert calculate_duration(None, '2021-01-01') == 0

    def test_unparsable_start_is_zero(self):
        assert calculate_duration('not a date', '2021-01-01') == 0

    def test_unparsable_end_treated_as_ongoing(self):
        now = datetime(2021, 3, 1)
        assert calculate_duration('2021-01-01', 'garbage', now=now) == 2


class TestEducation:
    """Test cases for degree and grade parsing"""

    def test_degree_substring_match(self):
        assert get_education_level('Bachelor of Technology') == 3
        assert get_education_level('MASTER of Science') == 4
        assert get_education_level('PhD in Physics') == 5

    def test_unknown_degree_uses_default(self):
        assert get_education_level('Certificate in Welding') == 1
        assert get_education_level('Certificate', default=0) == 0

    def test_custom_degree_table(self):
        assert get_education_level('bootcamp', {'bootcamp': 2}) == 2

    def test_parse_grade(self):
        assert parse_grade(8.5) == 8.5
        assert parse_grade(' 7.25 ') == 7.25
        assert parse_grade('A+') == 0.0
        assert parse_grade(None) == 0.0


class TestCandidateProfile:
    """Test cases for candidate extraction"""

    @pytest.fixture
    def candidate_record(self):
        return {
            'id': 42,
            'skills': [{'name': 'Python'}, 'SQL', {'name': 'python'}, {'name': None}],
            'experiences': [
                {
                    'title': ' Software Engineer ',
                    'company': {'name': 'Acme'},
                    'startDate': '2020-01-01',
                    'endDate': '2022-01-01',
                    'skills': [{'name': 'Go'}],
                },
                {
                    'title': 'Intern',
                    'companyName': 'Startup',
                    'startDate': '2023-01-01',
                    'endDate': None,
                },
            ],
            'education': [{'degree': 'Bachelor', 'field': 'CS', 'grade': '9.0'}],
            'city': 'Pune',
            'preferredIndustries': ['Technology'],
            'expectedSalary': 75000,
        }

    def test_skills_are_lowercased_and_deduplicated_in_order(self, candidate_record):
        profile = extract_candidate_profile(candidate_record)
        assert profile.skills == ('python', 'sql')

    def test_experience_entries(self, candidate_record):
        profile = extract_candidate_profile(candidate_record, now=datetime(2024, 1, 1))

        assert profile.id == '42'
        assert [e.title for e in profile.experience] == ['software engineer', 'intern']
        assert profile.experience[0].company_name == 'Acme'
        assert profile.experience[0].duration_months == 24
        assert profile.experience[0].skills == ('go',)
        assert profile.experience[1].company_name == 'Startup'
        assert profile.experience[1].duration_months == 12
        assert profile.experience[1].level == 'entry'

    def test_education_and_preferences(self, candidate_record):
        profile = extract_candidate_profile(candidate_record)

        assert profile.education[0].degree == 'bachelor'
        assert profile.education[0].field == 'cs'
        assert profile.education[0].grade == 9.0
        assert profile.location.city == 'Pune'
        assert profile.preferences.industries == ('Technology',)
        assert profile.preferences.expected_salary == 75000.0

    def test_unparsable_expected_salary_is_absent(self):
        profile = extract_candidate_profile({'id': 'c1', 'expectedSalary': '50k'})
        assert profile.preferences.expected_salary is None

    def test_numeric_string_expected_salary(self):
        profile = extract_candidate_profile({'id': 'c1', 'expectedSalary': '60,000'})
        assert profile.preferences.expected_salary == 60000.0

    def test_company_given_as_string(self):
        profile = extract_candidate_profile({
            'experiences': [{'title': 'Engineer', 'company': 'Acme', 'companyName': 'Acme Corp'}],
        })
        assert profile.experience[0].company_name == 'Acme Corp'

    def test_empty_record(self):
        profile = extract_candidate_profile({})

        assert profile.id is None
        assert profile.skills == ()
        assert profile.experience == ()
        assert profile.education == ()
        assert profile.location.city == ''


class TestJobProfile:
    """Test cases for job extraction"""

    def test_job_fields(self):
        profile = extract_job_profile({
            'id': 'j1',
            'title': 'Data Scientist',
            'type': 'FULL_TIME',
            'location': ' Bangalore ',
            'company': {'industry': 'Finance', 'size': '1000+'},
            'salary': {'min': 100, 'max': 200, 'currency': 'USD'},
            'skills': ['Python', 'python'],
        })

        assert profile.id == 'j1'
        assert profile.title == 'data scientist'
        assert profile.employment_type == 'full_time'
        assert profile.location == 'bangalore'
        assert profile.industry == 'finance'
        assert profile.company_size == '1000+'
        assert profile.salary.minimum == 100.0
        assert profile.salary.maximum == 200.0
        assert profile.skills == ('python',)

    def test_structured_location(self):
        profile = extract_job_profile({'location': {'city': 'Pune', 'country': 'India'}})
        assert profile.location == 'pune, india'

    def test_unparsable_salary_bounds_are_absent(self):
        assert extract_job_profile({'id': 'j1', 'salary': {'min': 'negotiable'}}).salary is None

        salary = extract_job_profile({'salary': {'min': 'negotiable', 'max': '90,000'}}).salary
        assert salary.minimum is None
        assert salary.maximum == 90000.0

    def test_unparsable_salary_string(self):
        assert extract_job_profile({'salary': 'competitive'}).salary is None
        assert extract_job_profile({'salary': ['50000']}).salary is None

    def test_company_given_as_string(self):
        profile = extract_job_profile({'id': 'j1', 'company': 'Acme'})
        assert profile.industry == ''
        assert profile.company_size == ''

    def test_missing_fields_default(self):
        profile = extract_job_profile({})

        assert profile.industry == ''
        assert profile.location == ''
        assert profile.salary is None
        assert profile.experience_level == 'entry'


if __name__ == "__main__":
    pytest.main([__file__])
