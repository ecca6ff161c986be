import os
import subprocess
import sys


def streamlit_command(ui_path: str):
    return [sys.executable, "-m", "streamlit", "run", ui_path]


def run_streamlit():
    """
    Launches the SLA dashboard (ui.py) with Streamlit.
    """
    app_dir = os.path.dirname(os.path.abspath(__file__))
    ui_path = os.path.join(app_dir, "ui.py")

    if not os.path.exists(ui_path):
        print(f"Error: ui.py not found at {ui_path}")
        sys.exit(1)

    print(f"Launching SLA dashboard from: {ui_path}")

    try:
        subprocess.run(streamlit_command(ui_path), check=True)
    except subprocess.CalledProcessError as e:
        print(f"The Streamlit app exited with an error: {e}")
        sys.exit(e.returncode)


if __name__ == "__main__":
    run_streamlit()
