from datetime import date

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd

from sem_power import config, output

DAY = date(2026, 10, 19)


def test_get_output_dir(tmp_path):
    out = output.get_output_dir('ttest-power', base=str(tmp_path), day=DAY)
    assert out == tmp_path / '2026-10-19-ttest-power'
    assert out.is_dir()


def test_output_path(tmp_path):
    path = output.output_path(tmp_path, 'rm-power', 'results', 'csv', day=DAY)
    assert path.name == '2026-10-19-rm-power-results.csv'


def test_save_files_and_summary(tmp_path):
    today = date.today().isoformat()

    csv_path = output.save_csv(pd.DataFrame({'n': [10, 20]}), tmp_path, 'demo', 'curve')
    report_path = output.save_report("power report", tmp_path, 'demo')
    json_path = output.save_json({'alpha': 0.05}, tmp_path, 'demo', 'params')

    fig, ax = plt.subplots()
    ax.plot([0, 1], [0, 1])
    fig_path = output.save_figure(fig, tmp_path, 'demo', 'plot')

    assert csv_path.name == f'{today}-demo-curve.csv'
    assert pd.read_csv(csv_path)['n'].tolist() == [10, 20]
    assert report_path.read_text() == "power report"
    assert '"alpha": 0.05' in json_path.read_text()
    assert fig_path.suffix == '.png'

    files = output.print_summary(tmp_path)
    assert len(files) == 4


def test_print_summary_missing_dir(tmp_path):
    assert output.print_summary(tmp_path / 'missing') == []


def test_power_labels():
    assert config.get_power_label(0.97) == "Very high"
    assert config.get_power_label(0.8) == "Adequate"
    assert config.get_power_label(0.6) == "Low"
    assert config.get_power_label(0.1) == "Very low"
