import pytest

import main


def test_config_from_simulate_args():
    args = main.build_parser().parse_args([
        "simulate", "--rows", "4", "--cols", "6", "--density", "rich",
        "--no-floor", "--seed", "3", "--perturb-interval", "100",
        "--steps", "12", "--device", "cpu",
    ])
    config = main.config_from_args(args)

    assert (config.rows, config.cols) == (4, 6)
    assert config.density == "rich"
    assert config.floor_y is None
    assert config.seed == 3
    assert config.perturb_interval == 100
    assert config.steps == 12


def test_simulate_runs(capsys):
    trajectory = main.main(["simulate", "--rows", "3", "--cols", "3", "--steps", "5",
                            "--device", "cpu"])
    assert trajectory.shape == (5, 9, 2)
    assert "Done!" in capsys.readouterr().out


def test_invalid_grid_exits_with_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main.main(["simulate", "--rows", "1", "--device", "cpu"])
    assert excinfo.value.code == 2
    assert "grid must be at least 2x2" in capsys.readouterr().err


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as excinfo:
        main.main([])
    assert excinfo.value.code == 1


def test_simulate_particle_plot(tmp_path, capsys):
    path = tmp_path / "particle.png"
    main.main(["simulate", "--rows", "3", "--cols", "3", "--steps", "5", "--device", "cpu",
               "--particle", "4", "--particle-path", str(path)])
    assert path.exists()
    assert "Particle 4 plot saved" in capsys.readouterr().out


def test_particle_out_of_range(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main.main(["simulate", "--rows", "3", "--cols", "3", "--device", "cpu",
                   "--particle", "9"])
    assert excinfo.value.code == 2
    assert "--particle must be in [0, 9)" in capsys.readouterr().err
