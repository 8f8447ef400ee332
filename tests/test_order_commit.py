import os
import sys
import unittest
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.transport import ApiError, TransportError  # noqa: E402
from flows.order_commit import (  # noqa: E402
    CommitPhase,
    DraftRegistry,
    OrderCommitFlow,
    OrderDraft,
)
from utils.pure import format_price  # noqa: E402


def make_draft(**overrides) -> OrderDraft:
    fields = dict(
        product_id=10,
        product_name="Wool Coat",
        sku_id=5,
        sku_code="grey-L",
        price=9900,
        stock=3,
        merchant_id=7,
    )
    fields.update(overrides)
    return OrderDraft(**fields)


class DraftRegistryTestCase(unittest.TestCase):
    def test_create_get_discard(self):
        registry = DraftRegistry()
        draft_id = registry.create(
            product_id=1,
            product_name="p",
            sku_id=2,
            sku_code="c",
            price=100,
            stock=1,
            merchant_id=3,
        )
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.get(draft_id).sku_id, 2)

        registry.discard(draft_id)
        registry.discard(draft_id)
        self.assertEqual(len(registry), 0)
        self.assertIsNone(registry.get(draft_id))
        self.assertIsNone(registry.get(None))

    def test_ids_are_unique(self):
        self.assertNotEqual(make_draft().draft_id, make_draft().draft_id)


class OrderCommitFlowTestCase(unittest.IsolatedAsyncioTestCase):
    def test_missing_draft_is_an_entry_error(self):
        flow = OrderCommitFlow(None)
        self.assertEqual(flow.phase, CommitPhase.ERROR)
        self.assertTrue(flow.error)
        self.assertFalse(flow.increment())
        self.assertFalse(flow.can_increment)
        self.assertEqual(flow.total_price, 0)

    def test_draft_without_ids_is_an_entry_error(self):
        self.assertEqual(OrderCommitFlow(make_draft(sku_id=0)).phase, CommitPhase.ERROR)
        self.assertEqual(
            OrderCommitFlow(make_draft(product_id=0)).phase, CommitPhase.ERROR
        )

    def test_quantity_bounds(self):
        flow = OrderCommitFlow(make_draft(stock=2))
        self.assertEqual(flow.quantity, 1)
        self.assertFalse(flow.can_decrement)

        self.assertFalse(flow.decrement())
        self.assertEqual(flow.quantity, 1)
        self.assertEqual(flow.error, "Quantity cannot be less than 1.")

        self.assertTrue(flow.increment())
        self.assertEqual(flow.error, "")
        self.assertEqual(flow.quantity, 2)
        self.assertFalse(flow.can_increment)

        self.assertFalse(flow.increment())
        self.assertEqual(flow.quantity, 2)
        self.assertEqual(flow.error, "You can buy at most 2 of this item.")

    def test_totals_follow_quantity(self):
        flow = OrderCommitFlow(make_draft())
        flow.increment()
        self.assertEqual(flow.total_price, 19800)
        self.assertEqual(format_price(flow.total_price), "¥198.00")
        self.assertEqual(flow.remaining_stock, 1)

    def test_build_request(self):
        flow = OrderCommitFlow(make_draft())
        flow.increment()
        request = flow.build_request()

        self.assertEqual(request["resp_user_id"], 7)
        self.assertEqual(len(request["items"]), 1)
        item = request["items"][0]
        self.assertEqual(item["product_id"], 10)
        self.assertEqual(item["sku_id"], 5)
        self.assertEqual(item["count"], 2)
        self.assertEqual(item["price"], 9900)
        self.assertEqual(item["ext"]["merchantId"], "7")
        self.assertEqual(item["ext"]["skuCode"], "grey-L")

    async def test_submit_success(self):
        create_order = mock.AsyncMock(return_value="123456789")
        flow = OrderCommitFlow(make_draft(), create_order=create_order)
        flow.increment()

        self.assertEqual(await flow.submit(), "123456789")
        self.assertEqual(flow.phase, CommitPhase.SUBMITTED)
        self.assertEqual(flow.order_id, "123456789")
        create_order.assert_awaited_once_with(flow.build_request())

        # a submitted flow is done
        self.assertIsNone(await flow.submit())
        self.assertFalse(flow.increment())
        create_order.assert_awaited_once()

    async def test_submit_without_order_id_stays_editable(self):
        flow = OrderCommitFlow(make_draft(), create_order=mock.AsyncMock(return_value=""))

        self.assertIsNone(await flow.submit())
        self.assertEqual(flow.phase, CommitPhase.EDITING)
        self.assertIsNone(flow.order_id)
        self.assertEqual(flow.error, "Order creation failed: unknown error")
        self.assertTrue(flow.increment())

    async def test_submit_without_merchant_is_rejected_locally(self):
        create_order = mock.AsyncMock()
        flow = OrderCommitFlow(make_draft(merchant_id=None), create_order=create_order)

        self.assertIsNone(await flow.submit())
        self.assertEqual(
            flow.error, "Order details are incomplete, cannot create the order."
        )
        self.assertEqual(flow.phase, CommitPhase.EDITING)
        create_order.assert_not_awaited()

    async def test_submit_api_error(self):
        create_order = mock.AsyncMock(side_effect=ApiError(1001, "stock not enough"))
        flow = OrderCommitFlow(make_draft(), create_order=create_order)

        self.assertIsNone(await flow.submit())
        self.assertEqual(flow.error, "Order creation failed: stock not enough")
        self.assertEqual(flow.phase, CommitPhase.EDITING)
        self.assertIsNone(flow.order_id)

    async def test_submit_api_error_without_message(self):
        create_order = mock.AsyncMock(side_effect=ApiError(1, ""))
        flow = OrderCommitFlow(make_draft(), create_order=create_order)

        await flow.submit()
        self.assertEqual(flow.error, "Order creation failed: unknown error")

    async def test_submit_transport_error_allows_retry(self):
        create_order = mock.AsyncMock(
            side_effect=[TransportError("connection refused"), "42"]
        )
        flow = OrderCommitFlow(make_draft(), create_order=create_order)

        self.assertIsNone(await flow.submit())
        self.assertEqual(
            flow.error, "Order creation failed: network error, please try again."
        )
        self.assertEqual(flow.phase, CommitPhase.EDITING)

        self.assertEqual(await flow.submit(), "42")
        self.assertEqual(flow.error, "")
        self.assertEqual(flow.phase, CommitPhase.SUBMITTED)


if __name__ == "__main__":
    unittest.main()
