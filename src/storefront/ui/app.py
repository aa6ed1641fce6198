"""
Streamlit UI for the grocery storefront.
- Catalog browsing and search
- Cart and checkout
- My orders
- Account (login / register / logout)
- AI assistant
- Staff: orders, inventory, notifications
- System health
"""

import streamlit as st
from pydantic import ValidationError

from storefront.core.app_state import build_app_state
from storefront.core.checkout import order_summary
from storefront.core.retry_utils import ApiError, error_message, form_error_message
from storefront.core.assistant import chat_with_ai
from storefront.models.address import AddressInput
from storefront.models.inventory import InventoryAdjustment, InventoryOperation
from storefront.models.order import CustomerInfo, staff_actions
from storefront.api.payments import PAYMENT_METHODS
from storefront.utils.formatters import format_date, format_price, order_status_label
from storefront.utils.health import check_api_connectivity, check_database, check_llm_connectivity

# -------------------------------------------------
# Page config
# -------------------------------------------------
st.set_page_config(
    page_title="Siêu thị trực tuyến",
    page_icon="🛒",
    layout="wide",
)

# -------------------------------------------------
# Session state
# -------------------------------------------------
if "app" not in st.session_state:
    st.session_state.app = build_app_state()
    st.session_state.app.session.init_auth()
    st.session_state.app.socket.connect()

if "assistant_history" not in st.session_state:
    st.session_state.assistant_history = []

if "last_order" not in st.session_state:
    st.session_state.last_order = None

app = st.session_state.app
user = app.resolver.user

# -------------------------------------------------
# Header
# -------------------------------------------------
st.markdown(
    "<h1 style='color:#15803d'>🛒 Siêu thị trực tuyến</h1>",
    unsafe_allow_html=True
)
st.caption(f"🛍️ Giỏ hàng: **{app.cart.total_items}** sản phẩm · "
           f"{'👤 ' + (user.name or user.email or user.id) if user else 'Khách'}")

tab_names = ["🛍️ Mua sắm", "🧺 Giỏ hàng", "📦 Đơn hàng", "🤖 Trợ lý AI", "👤 Tài khoản"]
if user and user.is_staff:
    tab_names += ["🗂️ Quản lý đơn", "🏬 Kho hàng", "🔔 Thông báo"]
tab_names.append("⚙️ Hệ thống")

tabs = dict(zip(tab_names, st.tabs(tab_names)))

# =================================================
# SHOPPING TAB
# =================================================
with tabs["🛍️ Mua sắm"]:
    col_search, col_category = st.columns([3, 1])

    with col_search:
        keyword = st.text_input("Tìm kiếm sản phẩm", key="search_keyword")
        history = app.search_history.load()
        if history:
            st.caption("Tìm kiếm gần đây: " + " · ".join(history))

    with col_category:
        try:
            categories = app.categories.get_root()
        except ApiError as e:
            categories = []
            st.error(error_message(e, "Không thể tải danh mục"))
        category_slugs = {c.name: c.slug for c in categories}
        category_name = st.selectbox("Danh mục", ["Tất cả"] + list(category_slugs))

    try:
        if keyword.strip():
            app.search_history.add(keyword)
            products = app.products.search(keyword.strip())
        else:
            products = app.products.get_products(category_slugs.get(category_name))
    except ApiError as e:
        products = []
        st.error(error_message(e, "Không thể tải sản phẩm"))

    if not products:
        st.info("Không có sản phẩm nào.")

    columns = st.columns(4)
    for index, product in enumerate(products):
        with columns[index % 4]:
            if product.image:
                st.image(product.image, use_container_width=True)
            st.markdown(f"**{product.name}**")
            if product.discount_percent:
                st.markdown(f"~~{format_price(product.unit_price)}~~ -{product.discount_percent:g}%")
            st.markdown(f"### {format_price(product.final_price or product.unit_price)}")
            st.caption(product.unit or "")

            if st.button("🛒 Thêm vào giỏ", key=f"add-{product.id}", disabled=not product.in_stock):
                app.cart.add_item(product.to_new_line_item())
                st.toast(f"Đã thêm {product.name} vào giỏ hàng")
                st.rerun()

# =================================================
# CART + CHECKOUT TAB
# =================================================
with tabs["🧺 Giỏ hàng"]:
    cart = app.cart.snapshot()

    if cart.is_empty:
        st.info("Giỏ hàng trống")
    else:
        for item in cart.items:
            col_name, col_qty, col_total, col_remove = st.columns([4, 2, 2, 1])
            col_name.markdown(f"**{item.name}**  \n{item.unit} · {format_price(item.price)}")
            quantity = col_qty.number_input(
                "Số lượng", min_value=1, value=item.quantity, step=1,
                key=f"qty-{item.id}", label_visibility="collapsed"
            )
            if quantity != item.quantity:
                app.cart.update_quantity(item.id, int(quantity))
                st.rerun()
            col_total.markdown(format_price(item.line_total))
            if col_remove.button("🗑️", key=f"remove-{item.id}"):
                app.cart.remove_item(item.id)
                st.rerun()

        if st.button("Xóa giỏ hàng"):
            app.cart.clear_cart()
            st.rerun()

        summary = order_summary(cart)
        st.markdown("---")
        st.write("Tạm tính:", format_price(summary.subtotal))
        st.write("Phí vận chuyển:", "Miễn phí" if summary.free_shipping else format_price(summary.shipping_fee))
        st.markdown(f"### 💰 Tổng cộng: {format_price(summary.total)}")

        st.subheader("Thông tin giao hàng")
        if not user:
            st.warning("Vui lòng đăng nhập để đặt hàng.")
        else:
            try:
                addresses = app.addresses.get_addresses()
            except ApiError as e:
                addresses = []
                st.error(error_message(e, "Không thể tải địa chỉ"))

            with st.form("checkout"):
                address_labels = {f"{a.full_name} - {a.full_address}": a for a in addresses}
                choice = st.selectbox("Địa chỉ đã lưu", ["Địa chỉ mới"] + list(address_labels))
                name = st.text_input("Họ tên", value=user.name or "")
                phone = st.text_input("Số điện thoại", value=user.phone or "")
                street = st.text_input("Địa chỉ")
                ward = st.text_input("Phường/Xã")
                city = st.text_input("Tỉnh/Thành phố")
                notes = st.text_area("Ghi chú")
                payment_method = st.radio("Thanh toán", ["cod"] + list(PAYMENT_METHODS), horizontal=True)
                submitted = st.form_submit_button("✅ Đặt hàng")

            if submitted:
                try:
                    if choice in address_labels:
                        address = address_labels[choice]
                    else:
                        address = app.addresses.create_address(
                            AddressInput(full_name=name, phone=phone, address=street, ward=ward, city=city)
                        )
                    customer = CustomerInfo(
                        name=address.full_name, phone=address.phone, address=address.full_address, notes=notes
                    )
                except ValidationError as e:
                    st.error(form_error_message(e))
                    st.stop()
                except ApiError as e:
                    st.error(error_message(e, "Không thể lưu địa chỉ"))
                    st.stop()

                with st.spinner("Đang tạo đơn hàng..."):
                    try:
                        result = app.checkout.place_order(customer, address.id)
                    except ApiError as e:
                        st.error(error_message(e, "Không thể tạo đơn hàng. Vui lòng thử lại."))
                        st.stop()

                if not result.completed:
                    st.info(f"Đơn hàng đang được xử lý (mã {result.job_id}). Vui lòng kiểm tra lại sau.")
                else:
                    st.session_state.last_order = result.order_id
                    st.success(f"Đặt hàng thành công! Mã đơn: {result.order_id}")
                    if payment_method in PAYMENT_METHODS:
                        try:
                            redirect_url = app.checkout.start_payment(result.order_id, payment_method)
                            st.link_button("💳 Thanh toán ngay", redirect_url)
                        except ApiError as e:
                            st.error(error_message(e, "Không thể khởi tạo thanh toán"))

# =================================================
# MY ORDERS TAB
# =================================================
with tabs["📦 Đơn hàng"]:
    if not user:
        st.info("Đăng nhập để xem đơn hàng.")
    else:
        try:
            orders = app.orders.get_my_orders()
        except ApiError as e:
            orders = []
            st.error(error_message(e, "Không thể tải đơn hàng"))

        for order in orders:
            with st.expander(f"#{order.id} · {format_date(order.created_at)} · "
                             f"{order_status_label(order.status)} · {format_price(order.total_amount)}"):
                st.dataframe([{
                    "Sản phẩm": i.name,
                    "SL": i.quantity,
                    "Đơn giá": format_price(i.price),
                } for i in order.items], use_container_width=True, hide_index=True)
                st.write("Giao đến:", order.customer_address)
                if order.can_cancel and st.button("Hủy đơn", key=f"cancel-{order.id}"):
                    try:
                        app.orders.cancel_order(order.id)
                        st.success("Đã hủy đơn hàng")
                        st.rerun()
                    except ApiError as e:
                        st.error(error_message(e, "Không thể hủy đơn hàng"))

# =================================================
# ASSISTANT TAB
# =================================================
with tabs["🤖 Trợ lý AI"]:
    for turn in st.session_state.assistant_history:
        with st.chat_message(turn["role"]):
            st.write(turn["content"])

    prompt = st.chat_input("Hỏi trợ lý về sản phẩm, đơn hàng, khuyến mãi...")
    if prompt:
        with st.spinner("🤖 Đang trả lời..."):
            reply = chat_with_ai(prompt, st.session_state.assistant_history)
        st.session_state.assistant_history += [
            {"role": "user", "content": prompt},
            {"role": "assistant", "content": reply},
        ]
        st.rerun()

# =================================================
# ACCOUNT TAB
# =================================================
with tabs["👤 Tài khoản"]:
    if user:
        st.write("Email:", user.email)
        st.write("Vai trò:", user.role)
        if st.button("Đăng xuất"):
            app.session.logout()
            st.rerun()
    else:
        col_login, col_register = st.columns(2)

        with col_login:
            with st.form("login"):
                st.subheader("Đăng nhập")
                email = st.text_input("Email")
                password = st.text_input("Mật khẩu", type="password")
                if st.form_submit_button("Đăng nhập"):
                    try:
                        data = app.session.login(email, password)
                        if data.get("requiresEmailVerification"):
                            st.warning("Vui lòng xác thực email trước khi đăng nhập.")
                        else:
                            st.rerun()
                    except ApiError as e:
                        st.error(error_message(e, "Đăng nhập thất bại"))

        with col_register:
            with st.form("register"):
                st.subheader("Đăng ký")
                reg_name = st.text_input("Họ tên")
                reg_email = st.text_input("Email", key="reg_email")
                reg_password = st.text_input("Mật khẩu", type="password", key="reg_password")
                if st.form_submit_button("Đăng ký"):
                    try:
                        app.session.register(reg_email, reg_password, reg_name)
                        st.success("Đăng ký thành công! Vui lòng kiểm tra email để xác thực.")
                    except ApiError as e:
                        st.error(error_message(e, "Đăng ký thất bại"))

# =================================================
# STAFF TABS
# =================================================
if "🗂️ Quản lý đơn" in tabs:
    with tabs["🗂️ Quản lý đơn"]:
        status = st.selectbox("Trạng thái", ["Tất cả", "pending", "confirmed", "shipped", "delivered", "cancelled"],
                              format_func=lambda s: s if s == "Tất cả" else order_status_label(s))
        try:
            page = app.orders.get_staff_orders(None if status == "Tất cả" else status, page=1, limit=50)
        except ApiError as e:
            page = None
            st.error(error_message(e, "Không thể tải danh sách đơn hàng"))

        for order in page.items if page else []:
            col_info, col_actions = st.columns([3, 2])
            col_info.markdown(f"**#{order.id}** · {order.customer_name} · {order.customer_phone}  \n"
                              f"{order_status_label(order.status)} · {format_price(order.total_amount)}")
            for action in staff_actions(order.status):
                if col_actions.button(action, key=f"{action}-{order.id}"):
                    try:
                        app.orders.apply_staff_action(order.id, action)
                        st.toast("Cập nhật đơn hàng thành công")
                        st.rerun()
                    except ApiError as e:
                        st.error(error_message(e, "Không thể cập nhật đơn hàng"))

    with tabs["🏬 Kho hàng"]:
        try:
            stock_products = app.products.get_products(limit=200)
        except ApiError as e:
            stock_products = []
            st.error(error_message(e, "Không thể tải sản phẩm"))

        by_name = {p.name: p for p in stock_products}
        selected = st.selectbox("Sản phẩm", [""] + list(by_name))
        product_id = by_name[selected].id if selected else ""

        if product_id:
            try:
                inventory = app.inventory.get_product_inventory(product_id)
                st.metric("Tồn kho", inventory.quantity)
                if inventory.is_low_stock():
                    st.warning("Sắp hết hàng")
            except ApiError as e:
                st.error(error_message(e, "Không thể tải tồn kho"))

        operation = st.radio("Thao tác", ["Nhập kho", "Xuất kho", "Điều chỉnh"], horizontal=True)
        with st.form("inventory"):
            quantity = st.number_input("Số lượng", value=0, step=1)
            note = st.text_input("Ghi chú")
            submitted = st.form_submit_button("Xác nhận")

        if submitted:
            success, failure = {
                "Nhập kho": ("Nhập kho thành công", "Không thể nhập kho"),
                "Xuất kho": ("Xuất kho thành công", "Không thể xuất kho"),
                "Điều chỉnh": ("Điều chỉnh tồn kho thành công", "Không thể điều chỉnh tồn kho"),
            }[operation]
            try:
                if operation == "Điều chỉnh":
                    app.inventory.adjust_stock(
                        InventoryAdjustment(product_id=product_id, new_quantity=int(quantity), note=note)
                    )
                else:
                    request = InventoryOperation(product_id=product_id, quantity=int(quantity), note=note)
                    if operation == "Nhập kho":
                        app.inventory.import_stock(request)
                    else:
                        app.inventory.export_stock(request)
                st.success(success)
            except ValidationError as e:
                st.error(form_error_message(e))
            except ApiError as e:
                st.error(error_message(e, failure))

        if product_id:
            try:
                history = app.inventory.get_history(product_id)
                st.dataframe([{
                    "Loại": t.type,
                    "SL": t.quantity,
                    "Trước": t.quantity_before,
                    "Sau": t.quantity_after,
                    "Ghi chú": t.note or "",
                    "Thời gian": format_date(t.created_at),
                } for t in history], use_container_width=True, hide_index=True)
            except ApiError as e:
                st.error(error_message(e, "Không thể tải lịch sử kho"))

    with tabs["🔔 Thông báo"]:
        try:
            app.notification_center.replace_all(app.notifications.get_staff_notifications().items)
        except ApiError as e:
            st.error(error_message(e, "Không thể tải thông báo"))

        center = app.notification_center
        st.caption(f"{center.unread_count} chưa đọc")
        for n in center.notifications:
            col_text, col_read = st.columns([5, 1])
            col_text.markdown(f"{'🔵 ' if not n.is_read else ''}**{n.title}**  \n{n.message}")
            if not n.is_read and col_read.button("Đã đọc", key=f"read-{n.id}"):
                try:
                    app.notifications.mark_as_read_for_staff(n.id)
                    center.mark_read(n.id)
                    st.rerun()
                except ApiError as e:
                    st.error(error_message(e))

# =================================================
# SYSTEM TAB
# =================================================
with tabs["⚙️ Hệ thống"]:
    st.subheader("System Health")

    if check_database(app.store.db_path):
        st.success("Local store connected")
    else:
        st.error("Local store unavailable")

    if check_api_connectivity():
        st.success("Backend API running")
    else:
        st.error("Backend API not reachable")

    if st.button("Kiểm tra Ollama"):
        if check_llm_connectivity():
            st.success("Ollama running")
        else:
            st.error("Ollama not reachable")

    if app.socket.connected:
        st.success("Real-time socket connected")
    else:
        st.warning("Real-time socket offline")
        if st.button("Kết nối lại"):
            app.socket.connect()
            st.rerun()

    if st.button("🔄 Reset Session"):
        app.socket.disconnect()
        st.session_state.clear()
        st.success("Session reset")
        st.rerun()
