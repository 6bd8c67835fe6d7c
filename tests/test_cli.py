"""Tests for the command-line entry point."""

import json
from unittest.mock import patch

from venture_sourcer.cli import main, parse_args


class TestParseArgs:
    """Tests for parse_args."""

    def test_search(self):
        args = parse_args(['search', 'fintech startups'])
        assert args.command == 'search'
        assert args.prompt == 'fintech startups'
        assert args.verbose is False

    def test_people_options(self):
        args = parse_args(['-v', 'people', 'Stripe', '--limit', '25',
                           '--seniority', 'vp', '--seniority', 'director', '--title', 'engineering'])
        assert args.verbose is True
        assert args.company == 'Stripe'
        assert args.limit == 25
        assert args.seniority == ['vp', 'director']
        assert args.title == 'engineering'


@patch('venture_sourcer.cli.setup_logging')
class TestMain:
    """Tests for main."""

    def test_usage(self, mock_logging, capsys):
        usage = {"has_key": True, "is_valid": True, "rate_limits": {}}
        with patch('venture_sourcer.apollo_client.check_api_usage', return_value=usage):
            exit_code = main(['usage'])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == usage

    def test_search_unconfigured(self, mock_logging, capsys):
        exit_code = main(['search', 'developer tools'])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output['companies'] == []
        assert output['meta']['total_unique'] == 0
        assert output['meta']['criteria']['keywords'] == ['developer', 'tools']

    def test_people_not_found(self, mock_logging, capsys):
        exit_code = main(['people', 'Nowhere Labs'])

        assert exit_code == 1
        assert capsys.readouterr().out == ''
