from task_glitch import theme
from task_glitch.config import AppConfig


def make_config():
    return AppConfig(
        database_url="sqlite://",
        storage_backend="memory",
        tasks_source="tasks.json",
        fetch_timeout=10,
        seed_count=0,
        log_level="INFO",
        log_dir=None,
        app_title="Pipeline",
        app_icon="💼",
    )


def test_set_theme():
    # Outside a Streamlit run the page config call is a no-op.
    try:
        theme.set_theme(make_config())
    except Exception as e:
        assert False, f"set_theme raised an exception: {e}"


def test_set_theme_without_stylesheet(tmp_path):
    try:
        theme.set_theme(make_config(), css_path=tmp_path / "missing.css")
    except Exception as e:
        assert False, f"set_theme raised an exception: {e}"
