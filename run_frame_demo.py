import logging

import numpy as np

from frame_core.config import FrameParameters, SimulationSettings
from frame_core.modal import ModalAnalyzer
from frame_core.session import SimulationSession


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # ===== 3-story, 2-bay frame =====
    frame = FrameParameters(
        stories=3,
        bays=2,
        story_height=3.0,    # m
        bay_width=6.0,       # m
        segments=1,
        story_mass=100.0,    # t per story
        column_ei=5.0e4,     # kN m^2
        beam_ei=8.0e4,
    )

    # ===== decaying 1 Hz sine, 5% damping =====
    settings = SimulationSettings(duration=10.0, dt=1.0 / 60.0, kind="sinusoidal",
                                  peak_accel=2.0, freq=1.0, damping_ratio=0.05)

    session = SimulationSession(frame, settings)
    model = session.model
    print("Nodes:", model.n_nodes, " Springs:", len(model.springs))

    # ===== modal properties =====
    f_est, T_est = session.modal_properties()
    print("\n--- Modal estimate (power iteration) ---")
    print(f"f = {f_est:.4f} Hz   T = {T_est:.4f} s")

    modal = ModalAnalyzer(model).run()
    print("\n--- Exact modal reference ---")
    print("f_n (Hz):", np.round(modal.frequencies, 4))
    print("T_n (s): ", np.round(modal.periods, 4))

    # ===== time history =====
    snapshots = session.run()
    roof = np.array([s.roof_displacement for s in snapshots])

    print("\n--- Time history ---")
    print("steps:", len(snapshots))
    print("max roof |x| (relative to base):",
          np.max(np.abs(roof - np.array([s.x[0] for s in snapshots]))))


if __name__ == "__main__":
    main()
