"""Tests for the scan CLI command."""

import json
import shutil

import pytest
import yaml
from click.testing import CliRunner

from ts_validator.cli.commands.scan import resolve_rules
from ts_validator.cli.main import cli
from ts_validator.analysis.validation import ValidationRuleSet
from ts_validator.version import __version__


class TestScanCommand:
    """Tests for the scan command."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def project(self, tmp_path, express_app_path):
        """A writable copy of the express app fixture."""
        target = tmp_path / "app"
        shutil.copytree(express_app_path, target)
        return target

    def write_config(self, project, config):
        (project / ".ts-validator.yaml").write_text(yaml.dump(config), encoding="utf-8")

    def scan_json(self, runner, path, tmp_path, *args):
        output_file = tmp_path / "report.json"
        result = runner.invoke(cli, [
            'scan', str(path), '--format', 'json', '--output', str(output_file), *args
        ])
        assert result.exit_code == 0, result.output
        return json.loads(output_file.read_text(encoding="utf-8"))

    def test_scan_help(self, runner):
        result = runner.invoke(cli, ['scan', '--help'])

        assert result.exit_code == 0
        assert 'Scan TypeScript route handlers' in result.output
        assert '--rules' in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_scan_terminal_output(self, runner, express_app_path):
        result = runner.invoke(cli, ['scan', str(express_app_path)])

        assert result.exit_code == 0
        assert 'TypeScript Validation Report' in result.output
        assert 'Unvalidated direct access: req.params' in result.output
        assert 'Unvalidated aliased access to req.query via `query`' in result.output
        assert 'routes/userRoutes.ts — 4 controllers found' in result.output
        assert '4 controllers in 3 files' in result.output

    def test_scan_prints_computed_members_literally(self, runner, tmp_path):
        (tmp_path / "routes.ts").write_text(
            "app.get('/', (req, res) => { const data = req.body; use(data['id']); });",
            encoding="utf-8",
        )

        result = runner.invoke(cli, ['scan', str(tmp_path), '--no-color'])

        assert "data.[computed: Str('id')] → req.body" in result.output

    def test_fail_on_warning(self, runner, express_app_path):
        result = runner.invoke(cli, ['scan', str(express_app_path), '--fail-on-warning'])

        assert result.exit_code == 1

    def test_fail_on_warning_safe_app(self, runner, safe_app_path):
        result = runner.invoke(cli, ['scan', str(safe_app_path), '--fail-on-warning'])

        assert result.exit_code == 0
        assert 'No unvalidated request input found!' in result.output

    def test_scan_single_file(self, runner, express_app_path, tmp_path):
        target = express_app_path / "src" / "routes" / "userRoutes.ts"

        data = self.scan_json(runner, target, tmp_path)

        assert data['summary']['files_analyzed'] == 1
        assert data['summary']['total'] == 6

    def test_scan_json_output(self, runner, express_app_path, tmp_path):
        data = self.scan_json(runner, express_app_path, tmp_path)

        assert data['rules'] == 'zod-strict'
        assert data['summary']['total'] == 6
        assert data['summary']['files_analyzed'] == 3
        assert data['summary']['by_kind'] == {'DirectAccess': 3, 'IndirectAccess': 1, 'Alias': 2}
        assert data['summary']['controllers'] == {'routes/userRoutes.ts': 4}
        assert data['violations'][0]['rule_id'] == 'TSV-001'
        assert data['violations'][0]['message'] == 'Unvalidated direct access: req.params'

    @pytest.mark.parametrize("rules,expected", [
        ('zod-strict', 6),
        ('zod-lenient', 5),
        ('custom', 6),
    ])
    def test_rules_option(self, runner, express_app_path, tmp_path, rules, expected):
        data = self.scan_json(runner, express_app_path, tmp_path, '--rules', rules)

        assert data['rules'] == rules
        assert data['summary']['total'] == expected

    def test_invalid_rules_option(self, runner, express_app_path):
        result = runner.invoke(cli, ['scan', str(express_app_path), '--rules', 'yup'])

        assert result.exit_code == 2

    def test_json_to_stdout(self, runner, safe_app_path):
        result = runner.invoke(cli, ['scan', str(safe_app_path), '--format', 'json'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['summary']['total'] == 0
        assert data['summary']['controllers'] == {'src/app.ts': 2}

    def test_scan_sarif_output(self, runner, express_app_path, tmp_path):
        output_file = tmp_path / "results.sarif"

        result = runner.invoke(cli, [
            'scan', str(express_app_path),
            '--format', 'sarif',
            '--output', str(output_file)
        ])

        assert result.exit_code == 0
        sarif_data = json.loads(output_file.read_text(encoding="utf-8"))
        assert sarif_data['version'] == "2.1.0"
        assert len(sarif_data['runs']) == 1
        assert len(sarif_data['runs'][0]['results']) == 6

    def test_scan_markdown_output(self, runner, express_app_path):
        result = runner.invoke(cli, ['scan', str(express_app_path), '--format', 'markdown'])

        assert result.exit_code == 0
        assert result.output.startswith('# TypeScript Validation Report')
        assert '**Violations:** 6' in result.output
        assert '### TSV-002: IndirectAccess' in result.output

    def test_broken_file_is_skipped(self, runner, broken_app_path, tmp_path):
        data = self.scan_json(runner, broken_app_path, tmp_path)

        assert data['summary']['files_analyzed'] == 1
        assert data['summary']['total'] == 1

    def test_broken_file_reported_in_terminal(self, runner, broken_app_path):
        result = runner.invoke(cli, ['scan', str(broken_app_path)])

        assert result.exit_code == 0
        assert 'Skipped 1 files that could not be parsed' in result.output

    def test_deeply_nested_file_is_skipped(self, runner, tmp_path):
        app = tmp_path / "app"
        app.mkdir()
        terms = " + ".join(["'a'"] * 1500)
        (app / "a_big.ts").write_text(f"const s = {terms};\n", encoding="utf-8")
        (app / "b_routes.ts").write_text(
            "app.get('/x', (req, res) => { use(req.body); });\n", encoding="utf-8"
        )

        data = self.scan_json(runner, app, tmp_path)

        assert data['summary']['files_analyzed'] == 1
        assert data['summary']['files_skipped'] == 1
        assert data['summary']['total'] == 1

    def test_sarif_to_stdout_includes_suppressions(self, runner, project):
        self.write_config(project, {'ignore': [{'kind': 'Alias', 'reason': 'Reviewed'}]})

        result = runner.invoke(cli, ['scan', str(project), '--format', 'sarif'])

        assert result.exit_code == 0
        results = json.loads(result.output)['runs'][0]['results']
        suppressed = [r for r in results if 'suppressions' in r]
        assert len(results) == 6
        assert len(suppressed) == 2
        assert suppressed[0]['suppressions'][0]['justification'] == 'Reviewed'

    def test_quiet_clean_scan_prints_nothing(self, runner, safe_app_path):
        result = runner.invoke(cli, ['--quiet', 'scan', str(safe_app_path)])

        assert result.exit_code == 0
        assert 'TypeScript Validation Report' not in result.output

    def test_rules_from_config(self, runner, project, tmp_path):
        self.write_config(project, {'scan': {'rules': 'zod-lenient'}})

        data = self.scan_json(runner, project, tmp_path)

        assert data['rules'] == 'zod-lenient'
        assert data['summary']['total'] == 5

    def test_cli_rules_override_config(self, runner, project, tmp_path):
        self.write_config(project, {'scan': {'rules': 'zod-lenient'}})

        data = self.scan_json(runner, project, tmp_path, '--rules', 'zod-strict')

        assert data['summary']['total'] == 6

    def test_fail_on_warning_from_config(self, runner, project):
        self.write_config(project, {'scan': {'fail_on_warning': True}})

        result = runner.invoke(cli, ['scan', str(project)])

        assert result.exit_code == 1

    def test_exclude_from_config(self, runner, project, tmp_path):
        self.write_config(project, {'scan': {'exclude': ['src/routes/**']}})

        data = self.scan_json(runner, project, tmp_path)

        assert data['summary']['files_analyzed'] == 2
        assert data['summary']['total'] == 0

    def test_ignore_rules_from_config(self, runner, project, tmp_path):
        self.write_config(project, {
            'ignore': [{'kind': 'Alias', 'reason': 'Aliases are checked in review'}]
        })

        data = self.scan_json(runner, project, tmp_path)

        assert data['summary']['total'] == 4
        assert data['summary']['suppressed'] == 2
        assert data['suppressed'][0]['reason'] == 'Aliases are checked in review'

    def test_ignore_rules_in_terminal(self, runner, project):
        self.write_config(project, {'ignore': [{'kind': 'TSV-003'}]})

        result = runner.invoke(cli, ['scan', str(project)])

        assert '2 violations suppressed by configuration' in result.output

    def test_baseline_roundtrip(self, runner, project, tmp_path):
        baseline_file = tmp_path / "baseline.json"

        self.scan_json(runner, project, tmp_path, '--save-baseline', str(baseline_file))
        assert baseline_file.exists()

        data = self.scan_json(runner, project, tmp_path, '--baseline', str(baseline_file))
        assert data['summary']['total'] == 0

    def test_baseline_reports_new_violations(self, runner, project, tmp_path):
        baseline_file = tmp_path / "baseline.json"
        self.scan_json(runner, project, tmp_path, '--save-baseline', str(baseline_file))

        (project / "src" / "extra.ts").write_text(
            "app.get('/x', (req, res) => { res.send(req.body); });", encoding="utf-8"
        )
        data = self.scan_json(runner, project, tmp_path, '--baseline', str(baseline_file))

        assert data['summary']['total'] == 1
        assert data['violations'][0]['file'].endswith('src/extra.ts')


class TestResolveRules:
    """Tests for rule set resolution."""

    def test_cli_wins(self):
        assert resolve_rules('custom', 'zod-lenient') is ValidationRuleSet.CUSTOM

    def test_config_used_without_cli(self):
        assert resolve_rules(None, 'zod-lenient') is ValidationRuleSet.ZOD_LENIENT

    def test_default(self):
        assert resolve_rules(None, None) is ValidationRuleSet.ZOD_STRICT

    def test_unknown_config_value_falls_back(self):
        assert resolve_rules(None, 'joi') is ValidationRuleSet.ZOD_STRICT
