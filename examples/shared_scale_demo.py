from __future__ import annotations

import logging

import numpy as np

from linemarks import ColorScale, FlexLineModel, LinearScale, LinesModel


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    x_scale = LinearScale(name="x")
    y_scale = LinearScale(name="y")
    y_scale.on("domain_changed", lambda domain: print(f"y domain -> {domain}"))

    x = np.linspace(0.0, 10.0, 21)
    lines = LinesModel(
        scales={"x": x_scale, "y": y_scale},
        x=x,
        y=[np.sin(x), 0.5 * np.cos(x)],
        labels=["sin"],
    )
    print("curves:", [curve.name for curve in lines.mark_data])

    flex = FlexLineModel(
        scales={"x": x_scale, "y": y_scale, "color": ColorScale(mid=0.0), "width": LinearScale()},
        x=x,
        y=2.0 * np.tanh(x - 5.0),
        color=np.gradient(np.tanh(x - 5.0)),
        width=np.abs(x - 5.0) + 1.0,
    )
    print("segments:", len(flex.mark_data[0].values))

    flex.set(preserve_domain={"y": True})
    lines.set(labels=["sin", "cos"])
    print("curves:", [curve.name for curve in lines.mark_data])
    print(f"x domain {x_scale.domain}, y domain {y_scale.domain}")


if __name__ == "__main__":
    main()
