"""CSS for the status panel."""

APP_CSS = """
Screen {
    background: #000000;
    overflow: hidden;
    scrollbar-size: 0 0;
}

#metric-bar {
    height: 1;
    padding: 0 1;
    background: #050f15;
}

MetricLabel {
    width: auto;
    color: #cccccc;
}

MetricLabel.-na {
    color: #666666;
}

MetricLabel.-error {
    color: #ff3333;
    text-style: bold;
}

.separator-label {
    width: auto;
    color: #447777;
    margin: 0 1;
}

#strategy-line {
    height: 1;
    padding: 0 1;
    color: #447777;
}
"""
