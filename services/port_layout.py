"""
Port Layout.

Switch-local geometry of the port handles on a switch faceplate. The
rendering layer can supply its own ``PortLayout``; ``FaceplateLayout`` mirrors
the default 20-port faceplate drawing.
"""

from PyQt6.QtCore import QPointF, QRectF

from models.network import ACCESS_PORT_COUNT, TOTAL_PORTS


class PortLayout:
    """
    Geometry provider for port handles.

    Subclasses return each port's handle rectangle in coordinates relative to
    the switch's top-left corner.
    """

    def handle_rect(self, port_id: int) -> QRectF:
        raise NotImplementedError

    def anchor(self, port_id: int) -> QPointF:
        """Switch-local snap anchor: top centre of the handle."""
        rect = self.handle_rect(port_id)
        return QPointF(rect.center().x(), rect.top())


class FaceplateLayout(PortLayout):
    """
    Default faceplate: a 660x160 chassis with a 36px title bar.

    Access ports 1-16 sit in an 8x2 grid on the left, uplinks 17-20 in a 2x2
    grid on the right.
    """

    WIDTH = 660.0
    HEIGHT = 160.0

    PORT_WIDTH = 48.0
    PORT_HEIGHT = 40.0
    ROW_PITCH = 52.0

    ACCESS_ORIGIN = (30.0, 58.0)
    ACCESS_COLUMNS = 8
    ACCESS_COL_PITCH = 56.0

    UPLINK_ORIGIN = (486.0, 58.0)
    UPLINK_COLUMNS = 2
    UPLINK_COL_PITCH = 64.0

    def handle_rect(self, port_id: int) -> QRectF:
        if not 1 <= port_id <= TOTAL_PORTS:
            raise ValueError(f"No port {port_id} on the faceplate")

        if port_id <= ACCESS_PORT_COUNT:
            index = port_id - 1
            (x0, y0), cols, pitch = self.ACCESS_ORIGIN, self.ACCESS_COLUMNS, self.ACCESS_COL_PITCH
        else:
            index = port_id - ACCESS_PORT_COUNT - 1
            (x0, y0), cols, pitch = self.UPLINK_ORIGIN, self.UPLINK_COLUMNS, self.UPLINK_COL_PITCH

        row, col = divmod(index, cols)
        return QRectF(
            x0 + col * pitch,
            y0 + row * self.ROW_PITCH,
            self.PORT_WIDTH,
            self.PORT_HEIGHT,
        )
